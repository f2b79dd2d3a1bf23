from functools import lru_cache

from sqlmodel import Session

from app.models.enums import EntityStatus, NotificationType, status_label
from app.services.comment_service import record_evidence
from app.services.events import EntityReviewed, EventBus, EvidenceSubmitted, ReportStatusChanged
from app.services.notification_service import create_notification

ENTITY_APPROVED_MESSAGE = 'Tu cuenta de entidad ha sido aprobada. Ya puedes acceder al sistema.'
ENTITY_REJECTED_MESSAGE = 'Tu solicitud de registro ha sido rechazada. Motivo: {reason}'


def notify_report_status_change(session: Session, event: ReportStatusChanged) -> None:
    if not event.owner_id:
        return
    label = status_label(event.new_status)
    create_notification(
        session,
        event.owner_id,
        f'Tu reporte #{event.tracking_code} ha cambiado a estado: {label}',
        NotificationType.INFO,
        {
            'report_id': event.report_id,
            'report_code': event.tracking_code or '---',
            'entity_name': event.actor.display_name,
            'old_status': event.old_status.value,
            'new_status': event.new_status.value,
            'address': event.address or '',
        },
    )


def notify_entity_review(session: Session, event: EntityReviewed) -> None:
    if event.decision == EntityStatus.APPROVED:
        create_notification(session, event.user_id, ENTITY_APPROVED_MESSAGE, NotificationType.SUCCESS)
        return
    create_notification(
        session,
        event.user_id,
        ENTITY_REJECTED_MESSAGE.format(reason=event.reason),
        NotificationType.ERROR,
    )


def build_event_bus() -> EventBus:
    bus = EventBus()
    bus.subscribe(ReportStatusChanged, notify_report_status_change)
    bus.subscribe(EvidenceSubmitted, record_evidence)
    bus.subscribe(EntityReviewed, notify_entity_review)
    return bus


@lru_cache
def get_event_bus() -> EventBus:
    return build_event_bus()
