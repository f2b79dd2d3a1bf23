from typing import Optional
from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel


class AppRating(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'app_ratings'

    user_id: str = Field(index=True)
    rating: int
    comment: Optional[str] = None
