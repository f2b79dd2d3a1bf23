from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class AppRatingCreate(BaseModel):
    rating: int
    comment: Optional[str] = None


class AppRatingOut(BaseModel):
    id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime


class AppRatingSummary(BaseModel):
    count: int
    average: float
