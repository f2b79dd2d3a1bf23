"""Report lifecycle: creation, status transitions and citizen rating.

Any status may be requested from any other; what is enforced is the set of
required fields per target status, first-time stamping of the lifecycle
timestamps, one history row per actual status change, and best-effort
follow-ups (citizen notification, evidence attachments) that run after the
report row has been committed.
"""
from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from typing import Any, Optional

from loguru import logger
from sqlalchemy import func, literal, update
from sqlmodel import Session

from app.core.config import settings
from app.core.errors import ConflictError, PermissionDeniedError, ValidationError
from app.models.base import utc_now
from app.models.enums import EntityStatus, HistoryAction, ReportStatus, UserRole
from app.models.report import Report
from app.models.report_file import ReportFile
from app.models.user import User
from app.schemas.report import ReportCreate, ReportTransition
from app.services.category_service import require_category
from app.services.entity_service import get_entity_categories, get_entity_for_user, is_report_visible
from app.services.events import Actor, EvidenceSubmitted, ReportStatusChanged
from app.services.history_service import append_history
from app.services.report_service import get_report_by_code, require_report
from app.services.storage import IncomingFile, build_object_path, get_blob_storage, validate_submission
from app.services.subscribers import get_event_bus

CREATED_COMMENT = 'Reporte creado por el ciudadano'
TRACKING_CODE_LENGTH = 8
_TRACKING_ALPHABET = string.ascii_uppercase + string.digits

STATUS_TIMESTAMPS: dict[ReportStatus, str] = {
    ReportStatus.IN_REVIEW: 'reviewed_at',
    ReportStatus.IN_PROGRESS: 'started_at',
    ReportStatus.RESOLVED: 'resolved_at',
    ReportStatus.CLOSED: 'closed_at',
}


@dataclass
class LifecycleResult:
    report: Report
    warnings: list[str] = field(default_factory=list)


def generate_tracking_code(session: Session) -> str:
    while True:
        suffix = ''.join(secrets.choice(_TRACKING_ALPHABET) for _ in range(TRACKING_CODE_LENGTH))
        code = f'{settings.TRACKING_CODE_PREFIX}-{suffix}'
        if get_report_by_code(session, code) is None:
            return code


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip()


def resolve_actor(session: Session, user: User, report: Optional[Report] = None) -> Actor:
    """Build the acting identity for a staff mutation, refusing anyone who may not act on ``report``."""
    if user.role == UserRole.ADMIN:
        return Actor(user_id=user.id, display_name=settings.ADMIN_DISPLAY_NAME, role=user.role)
    if user.role != UserRole.ENTITY:
        raise PermissionDeniedError('Solo entidades o administradores pueden gestionar reportes')
    entity = get_entity_for_user(session, user)
    if entity is None or entity.status != EntityStatus.APPROVED:
        raise PermissionDeniedError('La entidad no está aprobada')
    if report is not None and not is_report_visible(report, get_entity_categories(session, entity)):
        raise PermissionDeniedError('El reporte no pertenece a las categorías de la entidad')
    return Actor(user_id=user.id, display_name=entity.name or user.full_name or 'Entidad', role=user.role)


REQUIRED_REPORT_FIELDS = {
    'title': 'El título es obligatorio',
    'description': 'La descripción es obligatoria',
    'location_address': 'La dirección es obligatoria',
}


def _required_text(payload: ReportCreate) -> dict[str, str]:
    cleaned = {}
    for name, message in REQUIRED_REPORT_FIELDS.items():
        value = _clean(getattr(payload, name))
        if not value:
            raise ValidationError(message)
        cleaned[name] = value
    return cleaned


def check_transition(payload: ReportTransition, files: list[IncomingFile]) -> None:
    if payload.status == ReportStatus.RESOLVED and not _clean(payload.resolution_notes):
        raise ValidationError('Las notas de resolución son obligatorias para resolver el reporte')
    if payload.status == ReportStatus.REJECTED and not _clean(payload.rejection_reason):
        raise ValidationError('El motivo de rechazo es obligatorio para rechazar el reporte')
    validate_submission(files)


def stamp_lifecycle_timestamp(status: ReportStatus, now) -> dict[str, Any]:
    """UPDATE values that set the status timestamp only where it is still NULL."""
    attribute = STATUS_TIMESTAMPS.get(status)
    if attribute is None:
        return {}
    column = getattr(Report, attribute)
    return {attribute: func.coalesce(column, literal(now, column.type))}


def create_report(
    session: Session,
    citizen: User,
    payload: ReportCreate,
    files: Optional[list[IncomingFile]] = None,
) -> LifecycleResult:
    files = files or []
    if citizen.role != UserRole.CITIZEN:
        raise PermissionDeniedError('Solo los ciudadanos pueden crear reportes')
    text = _required_text(payload)
    require_category(session, payload.category_id)
    validate_submission(files)

    now = utc_now()
    report = Report(
        tracking_code=generate_tracking_code(session),
        category_id=payload.category_id,
        urgency_level=payload.urgency_level,
        **text,
        lat=payload.lat,
        lon=payload.lon,
        user_id=citizen.id,
        citizen_name=payload.citizen_name or citizen.full_name,
        citizen_email=payload.citizen_email or citizen.email,
        citizen_phone=payload.citizen_phone or citizen.phone,
        prefer_contact=payload.prefer_contact,
        status=ReportStatus.RECEIVED,
        created_at=now,
        updated_at=now,
    )
    session.add(report)
    session.flush()
    append_history(
        session,
        report.id,
        HistoryAction.CREATED,
        changed_by=citizen.id,
        changed_by_name=citizen.full_name,
        new_value=ReportStatus.RECEIVED.value,
        comment=CREATED_COMMENT,
        commit=False,
    )
    session.commit()
    session.refresh(report)
    logger.info('report.created', report_id=report.id, tracking_code=report.tracking_code, files=len(files))

    warnings = _store_creation_files(session, report, files)
    return LifecycleResult(report=report, warnings=warnings)


def _store_creation_files(session: Session, report: Report, files: list[IncomingFile]) -> list[str]:
    if not files:
        return []
    storage = get_blob_storage()
    warnings: list[str] = []
    for item in files:
        path = build_object_path(report.id, item.filename)
        try:
            url = storage.upload(path, item.data, item.content_type)
            session.add(ReportFile(report_id=report.id, file_path=path, file_url=url))
            session.commit()
        except Exception as exc:  # noqa: BLE001
            session.rollback()
            logger.warning('report.file_upload_failed', report_id=report.id, file_name=item.filename, error=str(exc))
            warnings.append(f'No se pudo subir {item.filename}')
    return warnings


def transition_report(
    session: Session,
    report_id: str,
    user: User,
    payload: ReportTransition,
    files: Optional[list[IncomingFile]] = None,
) -> LifecycleResult:
    files = files or []
    report = require_report(session, report_id)
    actor = resolve_actor(session, user, report)
    check_transition(payload, files)

    old_status = ReportStatus(report.status)
    new_status = payload.status
    now = utc_now()
    stamped = STATUS_TIMESTAMPS.get(new_status)
    if stamped is not None and getattr(report, stamped) is not None:
        stamped = None

    statement = update(Report).where(Report.id == report.id)
    if payload.expected_version is not None:
        statement = statement.where(Report.version == payload.expected_version)
    statement = statement.values(
        status=new_status,
        admin_notes=payload.admin_notes,
        resolution_notes=payload.resolution_notes,
        rejection_reason=payload.rejection_reason,
        assigned_user_id=payload.assigned_user_id or user.id,
        updated_at=now,
        version=Report.version + 1,
        **stamp_lifecycle_timestamp(new_status, now),
    )
    result = session.execute(statement.execution_options(synchronize_session=False))
    if result.rowcount != 1:
        session.rollback()
        logger.info('report.version_conflict', report_id=report_id, expected_version=payload.expected_version)
        raise ConflictError('El reporte fue modificado por otro usuario; recarga e intenta de nuevo')

    changed = old_status != new_status
    if changed:
        append_history(
            session,
            report.id,
            HistoryAction.STATUS_CHANGE,
            changed_by=user.id,
            changed_by_name=actor.display_name,
            old_value=old_status.value,
            new_value=new_status.value,
            comment=payload.admin_notes,
            commit=False,
        )
    session.commit()
    session.refresh(report)
    logger.info(
        'report.transitioned',
        report_id=report.id,
        old_status=old_status.value,
        new_status=new_status.value,
        stamped=stamped,
        actor_id=user.id,
    )

    bus = get_event_bus()
    warnings: list[str] = []
    if changed:
        warnings.extend(
            bus.publish(
                session,
                ReportStatusChanged(
                    report_id=report.id,
                    tracking_code=report.tracking_code,
                    owner_id=report.user_id,
                    old_status=old_status,
                    new_status=new_status,
                    address=report.location_address,
                    actor=actor,
                ),
            )
        )
    if files:
        warnings.extend(
            bus.publish(
                session,
                EvidenceSubmitted(report_id=report.id, status=new_status, actor=actor, files=files),
            )
        )
    session.refresh(report)
    return LifecycleResult(report=report, warnings=warnings)


def rate_report(
    session: Session,
    report_id: str,
    citizen: User,
    rating: int,
    comment: Optional[str] = None,
) -> Report:
    report = require_report(session, report_id)
    if report.user_id != citizen.id:
        raise PermissionDeniedError('Solo el ciudadano que creó el reporte puede calificarlo')
    if not 1 <= rating <= 5:
        raise ValidationError('La calificación debe estar entre 1 y 5')
    if report.status != ReportStatus.RESOLVED:
        raise ValidationError('Solo se pueden calificar reportes resueltos')
    if report.citizen_rating is not None:
        raise ConflictError('El reporte ya fue calificado')

    now = utc_now()
    statement = (
        update(Report)
        .where(Report.id == report.id)
        .where(Report.status == ReportStatus.RESOLVED)
        .where(Report.citizen_rating.is_(None))
        .values(
            citizen_rating=rating,
            citizen_comment=_clean(comment) or None,
            rated_at=now,
            updated_at=now,
        )
    )
    result = session.execute(statement)
    session.commit()
    session.refresh(report)
    if result.rowcount != 1:
        if report.citizen_rating is not None:
            raise ConflictError('El reporte ya fue calificado')
        raise ValidationError('Solo se pueden calificar reportes resueltos')
    logger.info('report.rated', report_id=report.id, rating=rating)
    return report
