from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlmodel import Session
from app.api.v1.deps import ensure_can_view, read_uploads
from app.core.errors import NotFoundError, PermissionDeniedError
from app.db.session import get_session
from app.models.enums import (
    HISTORY_ACTION_LABELS,
    REPORT_STATUS_LABELS,
    ContactPreference,
    HistoryAction,
    ReportStatus,
    UrgencyLevel,
    UserRole,
)
from app.models.report import Report
from app.models.report_attachment import ReportAttachment
from app.models.report_comment import ReportComment
from app.models.report_history import ReportHistory
from app.models.user import User
from app.schemas.report import (
    AttachmentOut,
    CommentCreate,
    CommentOut,
    HistoryEntryOut,
    ReportCreate,
    ReportFileOut,
    ReportRatingCreate,
    ReportStats,
    ReportTransition,
    ReportTransitionOut,
    ReportView,
    StatusLabelOut,
)
from app.services.auth_service import get_current_user, require_citizen
from app.services.comment_service import add_comment, list_attachments, list_comments
from app.services.entity_service import get_entity_categories, get_entity_for_user
from app.services.history_service import list_history
from app.services.report_lifecycle import create_report, rate_report, resolve_actor, transition_report
from app.services.report_service import (
    ReportFilters,
    build_report_views,
    get_report_by_code,
    list_report_files,
    list_reports,
    list_reports_for_citizen,
    list_visible_reports,
    report_stats,
    require_report,
)

router = APIRouter(prefix='/reports', tags=['reports'])


def _to_view(session: Session, record: Report) -> ReportView:
    return build_report_views(session, [record])[0]


def _to_history_out(record: ReportHistory) -> HistoryEntryOut:
    return HistoryEntryOut(
        id=record.id,
        report_id=record.report_id,
        changed_by=record.changed_by,
        changed_by_name=record.changed_by_name,
        action=record.action,
        action_label=HISTORY_ACTION_LABELS.get(HistoryAction(record.action), str(record.action)),
        old_value=record.old_value,
        new_value=record.new_value,
        comment=record.comment,
        created_at=record.created_at,
    )


def _to_comment_out(record: ReportComment) -> CommentOut:
    return CommentOut(
        id=record.id,
        report_id=record.report_id,
        user_id=record.user_id,
        user_name=record.user_name,
        comment=record.comment,
        is_public=record.is_public,
        is_internal=record.is_internal,
        created_at=record.created_at,
    )


def _to_attachment_out(record: ReportAttachment) -> AttachmentOut:
    return AttachmentOut(
        id=record.id,
        report_id=record.report_id,
        file_url=record.file_url,
        file_name=record.file_name,
        file_type=record.file_type,
        file_size=record.file_size,
        attachment_type=record.attachment_type,
        uploaded_by=record.uploaded_by,
        created_at=record.created_at,
    )


def _scoped_reports(
    session: Session,
    user: User,
    filters: ReportFilters,
    limit: Optional[int],
    offset: int,
) -> list[Report]:
    if user.role == UserRole.ADMIN:
        return list_reports(session, filters, limit=limit, offset=offset)
    if user.role == UserRole.CITIZEN:
        return list_reports_for_citizen(session, user.id, filters, limit=limit, offset=offset)
    resolve_actor(session, user)
    entity = get_entity_for_user(session, user)
    return list_visible_reports(session, get_entity_categories(session, entity), filters, limit=limit, offset=offset)


def _viewable_report(session: Session, report_id: str, user: User) -> Report:
    record = require_report(session, report_id)
    ensure_can_view(session, record, user)
    return record


@router.post('', response_model=ReportTransitionOut, status_code=status.HTTP_201_CREATED)
def create_report_endpoint(
    category_id: str = Form(...),
    title: str = Form(...),
    description: str = Form(...),
    location_address: str = Form(...),
    urgency_level: UrgencyLevel = Form(UrgencyLevel.MEDIUM),
    lat: Optional[float] = Form(None),
    lon: Optional[float] = Form(None),
    citizen_name: Optional[str] = Form(None),
    citizen_email: Optional[str] = Form(None),
    citizen_phone: Optional[str] = Form(None),
    prefer_contact: ContactPreference = Form(ContactPreference.EMAIL),
    files: Optional[list[UploadFile]] = File(None),
    session: Session = Depends(get_session),
    user: User = Depends(require_citizen),
) -> ReportTransitionOut:
    payload = ReportCreate(
        category_id=category_id,
        urgency_level=urgency_level,
        title=title,
        description=description,
        location_address=location_address,
        lat=lat,
        lon=lon,
        citizen_name=citizen_name,
        citizen_email=citizen_email,
        citizen_phone=citizen_phone,
        prefer_contact=prefer_contact,
    )
    result = create_report(session, user, payload, read_uploads(files))
    return ReportTransitionOut(report=_to_view(session, result.report), warnings=result.warnings)


@router.get('', response_model=list[ReportView])
def list_reports_endpoint(
    status: Optional[ReportStatus] = None,
    category_id: Optional[str] = None,
    urgency_level: Optional[UrgencyLevel] = None,
    search: Optional[str] = None,
    limit: int = 100,
    offset: int = 0,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[ReportView]:
    filters = ReportFilters(status=status, category_id=category_id, urgency_level=urgency_level, search=search)
    return build_report_views(session, _scoped_reports(session, user, filters, limit, offset))


@router.get('/statuses', response_model=list[StatusLabelOut])
def list_statuses() -> list[StatusLabelOut]:
    return [StatusLabelOut(value=item.value, label=label) for item, label in REPORT_STATUS_LABELS.items()]


@router.get('/stats', response_model=ReportStats)
def report_stats_endpoint(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportStats:
    return report_stats(_scoped_reports(session, user, ReportFilters(), limit=None, offset=0))


@router.get('/by-code/{tracking_code}', response_model=ReportView)
def get_report_by_code_endpoint(
    tracking_code: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportView:
    record = get_report_by_code(session, tracking_code.strip().upper())
    if not record:
        raise NotFoundError('Reporte no encontrado')
    ensure_can_view(session, record, user)
    return _to_view(session, record)


@router.get('/{report_id}', response_model=ReportView)
def get_report_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportView:
    return _to_view(session, _viewable_report(session, report_id, user))


@router.post('/{report_id}/transition', response_model=ReportTransitionOut)
def transition_report_endpoint(
    report_id: str,
    status: ReportStatus = Form(...),
    admin_notes: Optional[str] = Form(None),
    resolution_notes: Optional[str] = Form(None),
    rejection_reason: Optional[str] = Form(None),
    assigned_user_id: Optional[str] = Form(None),
    expected_version: Optional[int] = Form(None),
    files: Optional[list[UploadFile]] = File(None),
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportTransitionOut:
    payload = ReportTransition(
        status=status,
        admin_notes=admin_notes,
        resolution_notes=resolution_notes,
        rejection_reason=rejection_reason,
        assigned_user_id=assigned_user_id,
        expected_version=expected_version,
    )
    result = transition_report(session, report_id, user, payload, read_uploads(files))
    return ReportTransitionOut(report=_to_view(session, result.report), warnings=result.warnings)


@router.post('/{report_id}/rating', response_model=ReportView)
def rate_report_endpoint(
    report_id: str,
    payload: ReportRatingCreate,
    session: Session = Depends(get_session),
    user: User = Depends(require_citizen),
) -> ReportView:
    record = rate_report(session, report_id, user, payload.rating, payload.comment)
    return _to_view(session, record)


@router.get('/{report_id}/history', response_model=list[HistoryEntryOut])
def list_history_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[HistoryEntryOut]:
    record = _viewable_report(session, report_id, user)
    return [_to_history_out(item) for item in list_history(session, record.id)]


@router.get('/{report_id}/comments', response_model=list[CommentOut])
def list_comments_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[CommentOut]:
    record = _viewable_report(session, report_id, user)
    public_only = user.role == UserRole.CITIZEN
    return [_to_comment_out(item) for item in list_comments(session, record.id, public_only=public_only)]


@router.post('/{report_id}/comments', response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def create_comment_endpoint(
    report_id: str,
    payload: CommentCreate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> CommentOut:
    record = _viewable_report(session, report_id, user)
    author_name = None
    if user.role == UserRole.CITIZEN:
        if payload.is_internal:
            raise PermissionDeniedError('Los ciudadanos no pueden publicar comentarios internos')
    else:
        author_name = resolve_actor(session, user, record).display_name
    comment = add_comment(
        session,
        record,
        user,
        payload.comment,
        author_name=author_name,
        is_internal=payload.is_internal,
    )
    return _to_comment_out(comment)


@router.get('/{report_id}/attachments', response_model=list[AttachmentOut])
def list_attachments_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[AttachmentOut]:
    record = _viewable_report(session, report_id, user)
    return [_to_attachment_out(item) for item in list_attachments(session, record.id)]


@router.get('/{report_id}/files', response_model=list[ReportFileOut])
def list_report_files_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[ReportFileOut]:
    record = _viewable_report(session, report_id, user)
    return [
        ReportFileOut(
            id=item.id,
            report_id=item.report_id,
            file_path=item.file_path,
            file_url=item.file_url,
            created_at=item.created_at,
        )
        for item in list_report_files(session, record.id)
    ]
