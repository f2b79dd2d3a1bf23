from typing import Optional
from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel


class Category(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'categories'

    name: str = Field(index=True, unique=True)
    icon: Optional[str] = None
    color: Optional[str] = None
    responsible_entity: Optional[str] = None
    is_active: bool = True
