from datetime import datetime
from typing import Optional
from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel, optional_timestamp
from app.models.enums import ContactPreference, ReportStatus, UrgencyLevel, enum_column


class Report(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'reports'

    tracking_code: str = Field(index=True, unique=True)
    category_id: str = Field(index=True)
    urgency_level: UrgencyLevel = Field(
        default=UrgencyLevel.MEDIUM,
        sa_column=enum_column(UrgencyLevel, 'report_urgency'),
    )
    title: str
    description: str

    location_address: str
    lat: Optional[float] = None
    lon: Optional[float] = None

    user_id: Optional[str] = Field(default=None, index=True)
    citizen_name: str = ''
    citizen_email: str = ''
    citizen_phone: Optional[str] = None
    prefer_contact: ContactPreference = Field(
        default=ContactPreference.EMAIL,
        sa_column=enum_column(ContactPreference, 'report_contact'),
    )

    status: ReportStatus = Field(
        default=ReportStatus.RECEIVED,
        sa_column=enum_column(ReportStatus, 'report_status'),
    )
    assigned_user_id: Optional[str] = Field(default=None, index=True)
    admin_notes: Optional[str] = None
    resolution_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    version: int = 1

    reviewed_at: Optional[datetime] = optional_timestamp()
    started_at: Optional[datetime] = optional_timestamp()
    resolved_at: Optional[datetime] = optional_timestamp()
    closed_at: Optional[datetime] = optional_timestamp()

    citizen_rating: Optional[int] = None
    citizen_comment: Optional[str] = None
    rated_at: Optional[datetime] = optional_timestamp()
