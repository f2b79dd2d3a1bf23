from typing import Any, Optional
from datetime import datetime
from pydantic import BaseModel
from app.models.enums import NotificationType


class NotificationUpdate(BaseModel):
    is_read: bool


class NotificationOut(BaseModel):
    id: str
    user_id: str
    message: str
    type: NotificationType
    is_read: bool
    payload: Optional[dict[str, Any]] = None
    created_at: datetime


class UnreadCountOut(BaseModel):
    unread: int
