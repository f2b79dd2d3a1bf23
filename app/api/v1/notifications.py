import asyncio
import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlmodel import Session
from app.core.errors import NotFoundError, PermissionDeniedError
from app.db.session import get_session
from app.models.notification import Notification
from app.models.user import User
from app.schemas.notification import NotificationOut, NotificationUpdate, UnreadCountOut
from app.services.auth_service import get_current_user
from app.services.notification_service import (
    get_notification,
    list_notifications,
    mark_all_read,
    set_read,
    unread_count,
)
from app.services.notification_stream import notification_broker

router = APIRouter(prefix='/notifications', tags=['notifications'])

KEEPALIVE_SECONDS = 15.0


def _owned_notification(session: Session, notification_id: str, user: User) -> Notification:
    record = get_notification(session, notification_id)
    if not record:
        raise NotFoundError('Notificación no encontrada')
    if record.user_id != user.id:
        raise PermissionDeniedError('La notificación pertenece a otro usuario')
    return record


def _to_notification_out(record: Notification) -> NotificationOut:
    return NotificationOut(
        id=record.id,
        user_id=record.user_id,
        message=record.message,
        type=record.type,
        is_read=record.is_read,
        payload=record.payload,
        created_at=record.created_at,
    )


@router.get('', response_model=list[NotificationOut])
def list_notifications_endpoint(
    unread_only: bool = False,
    limit: int = 50,
    offset: int = 0,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[NotificationOut]:
    records = list_notifications(session, user.id, unread_only=unread_only, limit=limit, offset=offset)
    return [_to_notification_out(record) for record in records]


@router.get('/unread-count', response_model=UnreadCountOut)
def unread_count_endpoint(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> UnreadCountOut:
    return UnreadCountOut(unread=unread_count(session, user.id))


@router.patch('/{notification_id}', response_model=NotificationOut)
def update_notification_endpoint(
    notification_id: str,
    payload: NotificationUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> NotificationOut:
    record = _owned_notification(session, notification_id, user)
    return _to_notification_out(set_read(session, record, payload.is_read))


@router.post('/read-all')
def mark_all_notifications_read(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> dict:
    return {'status': 'ok', 'updated': mark_all_read(session, user.id)}


@router.get('/stream')
async def stream_notifications(request: Request, user: User = Depends(get_current_user)):
    """Server-sent events: a ready frame, then one frame per new notification, with periodic keepalives."""
    user_id = user.id

    async def event_stream():
        subscription = notification_broker.subscribe(user_id)
        try:
            yield f"data: {json.dumps({'type': 'ready'})}\n\n"
            while True:
                if await request.is_disconnected():
                    break
                try:
                    item = await asyncio.wait_for(subscription.queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                yield f"data: {json.dumps({'type': 'notification', 'notification': item}, ensure_ascii=False)}\n\n"
        finally:
            notification_broker.unsubscribe(subscription)

    return StreamingResponse(event_stream(), media_type='text/event-stream')
