from typing import Optional
from sqlmodel import Session, select
from app.models.enums import HistoryAction
from app.models.report_history import ReportHistory


def append_history(
    session: Session,
    report_id: str,
    action: HistoryAction,
    changed_by: Optional[str] = None,
    changed_by_name: Optional[str] = None,
    old_value: Optional[str] = None,
    new_value: Optional[str] = None,
    comment: Optional[str] = None,
    commit: bool = True,
) -> ReportHistory:
    record = ReportHistory(
        report_id=report_id,
        action=action,
        changed_by=changed_by,
        changed_by_name=changed_by_name,
        old_value=old_value,
        new_value=new_value,
        comment=comment,
    )
    session.add(record)
    if commit:
        session.commit()
        session.refresh(record)
    return record


def list_history(session: Session, report_id: str) -> list[ReportHistory]:
    statement = (
        select(ReportHistory)
        .where(ReportHistory.report_id == report_id)
        .order_by(ReportHistory.created_at.desc())
    )
    return list(session.exec(statement).all())
