from typing import Any, Optional
from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel
from app.models.enums import NotificationType, enum_column


class Notification(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'notifications'

    user_id: str = Field(index=True)
    message: str
    type: NotificationType = Field(
        default=NotificationType.INFO,
        sa_column=enum_column(NotificationType, 'notification_type'),
    )
    is_read: bool = False
    payload: Optional[dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
