from typing import Optional
from loguru import logger
from sqlmodel import Session, select
from app.core.errors import PermissionDeniedError, ValidationError
from app.models.enums import AttachmentType, ReportStatus, UserRole
from app.models.report import Report
from app.models.report_attachment import ReportAttachment
from app.models.report_comment import ReportComment
from app.models.user import User
from app.services.events import EvidenceSubmitted
from app.services.storage import build_object_path, file_type_for, get_blob_storage


def add_comment(
    session: Session,
    report: Report,
    author: User,
    text: str,
    author_name: Optional[str] = None,
    is_internal: bool = False,
) -> ReportComment:
    body = (text or '').strip()
    if not body:
        raise ValidationError('El comentario no puede estar vacío')
    if author.role == UserRole.CITIZEN and is_internal:
        raise PermissionDeniedError('Los ciudadanos no pueden publicar comentarios internos')
    record = ReportComment(
        report_id=report.id,
        user_id=author.id,
        user_name=author_name or author.full_name or 'Usuario',
        comment=body,
        is_internal=is_internal,
        is_public=not is_internal,
    )
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def list_comments(
    session: Session,
    report_id: str,
    public_only: bool = True,
    limit: Optional[int] = 100,
    offset: int = 0,
) -> list[ReportComment]:
    statement = (
        select(ReportComment)
        .where(ReportComment.report_id == report_id)
        .order_by(ReportComment.created_at.desc())
    )
    if public_only:
        statement = statement.where(ReportComment.is_public.is_(True))
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def attachment_type_for(status: ReportStatus) -> AttachmentType:
    if status == ReportStatus.RESOLVED:
        return AttachmentType.RESOLUTION
    return AttachmentType.PROGRESS


def record_evidence(session: Session, event: EvidenceSubmitted) -> list[str]:
    """Upload each evidence file and bind it to the report.

    A file that fails to upload or insert is logged and skipped; the
    returned list carries one warning per skipped file.
    """
    storage = get_blob_storage()
    attachment_type = attachment_type_for(event.status)
    warnings: list[str] = []
    for item in event.files:
        try:
            url = storage.upload(build_object_path(event.report_id, item.filename), item.data, item.content_type)
            session.add(
                ReportAttachment(
                    report_id=event.report_id,
                    file_url=url,
                    file_name=item.filename,
                    file_type=file_type_for(item.content_type),
                    file_size=item.size,
                    attachment_type=attachment_type,
                    uploaded_by=event.actor.user_id,
                )
            )
            session.commit()
        except Exception as exc:  # noqa: BLE001
            session.rollback()
            logger.warning(
                'report.attachment_failed',
                report_id=event.report_id,
                file_name=item.filename,
                error=str(exc),
            )
            warnings.append(f'No se pudo adjuntar {item.filename}')
    return warnings


def list_attachments(session: Session, report_id: str) -> list[ReportAttachment]:
    statement = (
        select(ReportAttachment)
        .where(ReportAttachment.report_id == report_id)
        .order_by(ReportAttachment.created_at.desc())
    )
    return list(session.exec(statement).all())
