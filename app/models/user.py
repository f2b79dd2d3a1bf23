from typing import Optional
from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel
from app.models.enums import UserRole, enum_column


class User(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'users'

    email: str = Field(index=True, unique=True)
    hashed_password: str
    full_name: str = ''
    phone: Optional[str] = None
    is_active: bool = True
    role: UserRole = Field(default=UserRole.CITIZEN, sa_column=enum_column(UserRole, 'user_role'))
