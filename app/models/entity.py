from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel, TimestampModel
from app.models.enums import EntityStatus, enum_column


class Entity(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'entities'

    user_id: str = Field(index=True, unique=True)
    name: str
    email: str = Field(index=True)
    phone: Optional[str] = None
    nit: Optional[str] = None
    status: EntityStatus = Field(
        default=EntityStatus.PENDING,
        sa_column=enum_column(EntityStatus, 'entity_status'),
    )
    rejection_reason: Optional[str] = None
    rut_path: Optional[str] = None
    chamber_path: Optional[str] = None
    is_active: bool = True


class EntityCategory(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'entity_categories'
    __table_args__ = (UniqueConstraint('entity_id', 'category_id', name='uq_entity_category'),)

    entity_id: str = Field(index=True)
    category_id: str = Field(index=True)


class EntityAuditLog(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'entity_audit_logs'

    entity_id: str = Field(index=True)
    admin_id: str = Field(index=True)
    action: EntityStatus = Field(sa_column=enum_column(EntityStatus, 'entity_audit_action'))
    reason: Optional[str] = None
