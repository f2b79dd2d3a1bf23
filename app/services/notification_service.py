from typing import Any, Optional
from loguru import logger
from sqlalchemy import func
from sqlmodel import Session, select
from app.models.enums import NotificationType
from app.models.notification import Notification
from app.services.notification_stream import notification_broker


def to_stream_payload(record: Notification) -> dict[str, Any]:
    return {
        'id': record.id,
        'user_id': record.user_id,
        'message': record.message,
        'type': record.type.value if isinstance(record.type, NotificationType) else record.type,
        'is_read': record.is_read,
        'payload': record.payload,
        'created_at': record.created_at.isoformat(),
    }


def create_notification(
    session: Session,
    user_id: str,
    message: str,
    type: NotificationType = NotificationType.INFO,
    payload: Optional[dict[str, Any]] = None,
) -> Notification:
    record = Notification(user_id=user_id, message=message, type=type, payload=payload)
    session.add(record)
    session.commit()
    session.refresh(record)
    delivered = notification_broker.publish(user_id, to_stream_payload(record))
    logger.debug('notification.created', notification_id=record.id, user_id=user_id, delivered=delivered)
    return record


def list_notifications(
    session: Session,
    user_id: str,
    unread_only: bool = False,
    limit: Optional[int] = 50,
    offset: int = 0,
) -> list[Notification]:
    statement = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
    )
    if unread_only:
        statement = statement.where(Notification.is_read.is_(False))
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def get_notification(session: Session, notification_id: str) -> Optional[Notification]:
    return session.exec(select(Notification).where(Notification.id == notification_id)).first()


def set_read(session: Session, record: Notification, is_read: bool = True) -> Notification:
    if record.is_read == is_read:
        return record
    record.is_read = is_read
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def mark_all_read(session: Session, user_id: str) -> int:
    notifications = session.exec(
        select(Notification).where((Notification.user_id == user_id) & (Notification.is_read.is_(False)))
    ).all()
    for record in notifications:
        record.is_read = True
        session.add(record)
    session.commit()
    return len(notifications)


def unread_count(session: Session, user_id: str) -> int:
    statement = select(func.count(Notification.id)).where(
        (Notification.user_id == user_id) & (Notification.is_read.is_(False))
    )
    return int(session.exec(statement).one() or 0)
