from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field
from app.models.enums import (
    AttachmentType,
    ContactPreference,
    FileType,
    HistoryAction,
    ReportStatus,
    UrgencyLevel,
)


class ReportCreate(BaseModel):
    category_id: str
    urgency_level: UrgencyLevel = UrgencyLevel.MEDIUM
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location_address: str = Field(min_length=1)
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)
    citizen_name: Optional[str] = None
    citizen_email: Optional[str] = None
    citizen_phone: Optional[str] = None
    prefer_contact: ContactPreference = ContactPreference.EMAIL


class ReportTransition(BaseModel):
    status: ReportStatus
    admin_notes: Optional[str] = None
    resolution_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    assigned_user_id: Optional[str] = None
    expected_version: Optional[int] = None


class ReportRatingCreate(BaseModel):
    rating: int
    comment: Optional[str] = None


class ReportOut(BaseModel):
    id: str
    tracking_code: str
    category_id: str
    urgency_level: UrgencyLevel
    title: str
    description: str
    location_address: str
    lat: Optional[float] = None
    lon: Optional[float] = None
    user_id: Optional[str] = None
    citizen_name: str
    citizen_email: str
    citizen_phone: Optional[str] = None
    prefer_contact: ContactPreference
    status: ReportStatus
    assigned_user_id: Optional[str] = None
    admin_notes: Optional[str] = None
    resolution_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime
    reviewed_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    citizen_rating: Optional[int] = None
    citizen_comment: Optional[str] = None
    rated_at: Optional[datetime] = None


class ReportView(ReportOut):
    status_label: str
    category_name: Optional[str] = None
    category_icon: Optional[str] = None
    category_color: Optional[str] = None
    responsible_entity: Optional[str] = None
    assigned_user_name: Optional[str] = None


class ReportTransitionOut(BaseModel):
    report: ReportView
    warnings: list[str] = []


class ReportStats(BaseModel):
    total: int
    received: int
    in_review: int
    in_progress: int
    requires_info: int
    resolved: int
    rejected: int
    closed: int
    critical_count: int
    avg_rating: float


class StatusLabelOut(BaseModel):
    value: str
    label: str


class HistoryEntryOut(BaseModel):
    id: str
    report_id: str
    changed_by: Optional[str] = None
    changed_by_name: Optional[str] = None
    action: HistoryAction
    action_label: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    comment: Optional[str] = None
    created_at: datetime


class CommentCreate(BaseModel):
    comment: str
    is_internal: bool = False


class CommentOut(BaseModel):
    id: str
    report_id: str
    user_id: str
    user_name: str
    comment: str
    is_public: bool
    is_internal: bool
    created_at: datetime


class AttachmentOut(BaseModel):
    id: str
    report_id: str
    file_url: str
    file_name: str
    file_type: FileType
    file_size: int
    attachment_type: AttachmentType
    uploaded_by: str
    created_at: datetime


class ReportFileOut(BaseModel):
    id: str
    report_id: str
    file_path: str
    file_url: str
    created_at: datetime
