from typing import Optional
from fastapi import UploadFile
from sqlmodel import Session
from app.core.errors import PermissionDeniedError
from app.models.enums import UserRole
from app.models.report import Report
from app.models.user import User
from app.services.entity_service import get_entity_categories, get_entity_for_user, is_report_visible
from app.services.report_lifecycle import resolve_actor
from app.services.storage import IncomingFile


def read_uploads(files: Optional[list[UploadFile]]) -> list[IncomingFile]:
    items: list[IncomingFile] = []
    for upload in files or []:
        if not upload.filename:
            continue
        items.append(
            IncomingFile(
                filename=upload.filename,
                content_type=upload.content_type or 'application/octet-stream',
                data=upload.file.read(),
            )
        )
    return items


def ensure_can_view(session: Session, report: Report, user: User) -> None:
    if user.role == UserRole.ADMIN:
        return
    if user.role == UserRole.CITIZEN:
        if report.user_id != user.id:
            raise PermissionDeniedError('No tienes acceso a este reporte')
        return
    entity = get_entity_for_user(session, user)
    if entity is None or not is_report_visible(report, get_entity_categories(session, entity)):
        raise PermissionDeniedError('No tienes acceso a este reporte')
    resolve_actor(session, user, report)
