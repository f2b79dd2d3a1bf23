from typing import Optional
from dataclasses import dataclass
from sqlalchemy import or_
from sqlmodel import Session, select
from app.core.errors import NotFoundError
from app.models.category import Category
from app.models.enums import ReportStatus, UrgencyLevel, status_label
from app.models.report import Report
from app.models.report_file import ReportFile
from app.models.user import User
from app.schemas.report import ReportStats, ReportView
from app.services.category_service import get_categories_by_ids


@dataclass(frozen=True)
class ReportFilters:
    status: Optional[ReportStatus] = None
    category_id: Optional[str] = None
    urgency_level: Optional[UrgencyLevel] = None
    search: Optional[str] = None


def get_report(session: Session, report_id: str) -> Optional[Report]:
    return session.exec(select(Report).where(Report.id == report_id)).first()


def require_report(session: Session, report_id: str) -> Report:
    record = get_report(session, report_id)
    if not record:
        raise NotFoundError('Reporte no encontrado')
    return record


def get_report_by_code(session: Session, tracking_code: str) -> Optional[Report]:
    return session.exec(select(Report).where(Report.tracking_code == tracking_code)).first()


def _apply_filters(statement, filters: Optional[ReportFilters]):
    if filters is None:
        return statement
    if filters.status is not None:
        statement = statement.where(Report.status == filters.status)
    if filters.category_id:
        statement = statement.where(Report.category_id == filters.category_id)
    if filters.urgency_level is not None:
        statement = statement.where(Report.urgency_level == filters.urgency_level)
    if filters.search:
        pattern = f'%{filters.search.strip()}%'
        statement = statement.where(
            or_(
                Report.title.ilike(pattern),
                Report.tracking_code.ilike(pattern),
                Report.location_address.ilike(pattern),
            )
        )
    return statement


def list_reports(
    session: Session,
    filters: Optional[ReportFilters] = None,
    limit: Optional[int] = 100,
    offset: int = 0,
) -> list[Report]:
    statement = _apply_filters(select(Report).order_by(Report.created_at.desc()), filters)
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def list_reports_for_citizen(
    session: Session,
    user_id: str,
    filters: Optional[ReportFilters] = None,
    limit: Optional[int] = 100,
    offset: int = 0,
) -> list[Report]:
    statement = select(Report).where(Report.user_id == user_id).order_by(Report.created_at.desc())
    statement = _apply_filters(statement, filters)
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def list_visible_reports(
    session: Session,
    category_ids: list[str],
    filters: Optional[ReportFilters] = None,
    limit: Optional[int] = 100,
    offset: int = 0,
) -> list[Report]:
    # No subscriptions means no visible reports.
    if not category_ids:
        return []
    statement = (
        select(Report)
        .where(Report.category_id.in_(category_ids))
        .order_by(Report.created_at.desc())
    )
    statement = _apply_filters(statement, filters)
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def project_report_view(report: Report, category: Optional[Category], assignee: Optional[User]) -> ReportView:
    data = report.model_dump()
    return ReportView(
        **data,
        status_label=status_label(report.status),
        category_name=category.name if category else None,
        category_icon=category.icon if category else None,
        category_color=category.color if category else None,
        responsible_entity=category.responsible_entity if category else None,
        assigned_user_name=assignee.full_name if assignee else None,
    )


def build_report_views(session: Session, reports: list[Report]) -> list[ReportView]:
    categories = get_categories_by_ids(session, sorted({report.category_id for report in reports}))
    assignee_ids = sorted({report.assigned_user_id for report in reports if report.assigned_user_id})
    assignees: dict[str, User] = {}
    if assignee_ids:
        assignees = {user.id: user for user in session.exec(select(User).where(User.id.in_(assignee_ids))).all()}
    return [
        project_report_view(
            report,
            categories.get(report.category_id),
            assignees.get(report.assigned_user_id) if report.assigned_user_id else None,
        )
        for report in reports
    ]


def report_stats(reports: list[Report]) -> ReportStats:
    counts = {status: 0 for status in ReportStatus}
    critical = 0
    ratings: list[int] = []
    for report in reports:
        counts[ReportStatus(report.status)] += 1
        if report.urgency_level == UrgencyLevel.CRITICAL:
            critical += 1
        if report.citizen_rating:
            ratings.append(report.citizen_rating)
    average = round(sum(ratings) / len(ratings), 1) if ratings else 0.0
    return ReportStats(
        total=len(reports),
        **{status.value: count for status, count in counts.items()},
        critical_count=critical,
        avg_rating=average,
    )


def list_report_files(session: Session, report_id: str) -> list[ReportFile]:
    statement = (
        select(ReportFile)
        .where(ReportFile.report_id == report_id)
        .order_by(ReportFile.created_at)
    )
    return list(session.exec(statement).all())
