from typing import Optional
from datetime import datetime
from pydantic import BaseModel
from app.models.enums import EntityStatus


class EntityOut(BaseModel):
    id: str
    user_id: str
    name: str
    email: str
    phone: Optional[str] = None
    nit: Optional[str] = None
    status: EntityStatus
    rejection_reason: Optional[str] = None
    rut_path: Optional[str] = None
    chamber_path: Optional[str] = None
    categories: list[str] = []
    created_at: datetime


class EntityCategoriesUpdate(BaseModel):
    categories: list[str]


class EntityCategoriesOut(BaseModel):
    entity_id: str
    categories: list[str]


class EntityRejectRequest(BaseModel):
    reason: str


class EntityAuditLogOut(BaseModel):
    id: str
    entity_id: str
    admin_id: str
    action: EntityStatus
    reason: Optional[str] = None
    created_at: datetime


class EntityReviewOut(BaseModel):
    entity: EntityOut
    warnings: list[str] = []
