from datetime import datetime
from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel, timestamp_type


class RefreshToken(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'refresh_tokens'

    token: str = Field(index=True, unique=True)
    user_id: str = Field(index=True)
    expires_at: datetime = Field(sa_type=timestamp_type(), sa_column_kwargs={"nullable": False})
