from typing import Optional
from loguru import logger
from sqlalchemy import func
from sqlmodel import Session, select
from app.core.errors import ValidationError
from app.models.app_rating import AppRating
from app.models.user import User


def rate_platform(session: Session, user: User, rating: int, comment: Optional[str] = None) -> AppRating:
    """Store one platform rating; a user may rate as many times as they like."""
    if not 1 <= rating <= 5:
        raise ValidationError('La calificación debe estar entre 1 y 5')
    record = AppRating(user_id=user.id, rating=rating, comment=(comment or '').strip() or None)
    session.add(record)
    session.commit()
    session.refresh(record)
    logger.info('app_rating.created', rating_id=record.id, user_id=user.id, rating=rating)
    return record


def list_app_ratings(session: Session, limit: int = 100, offset: int = 0) -> list[AppRating]:
    statement = select(AppRating).order_by(AppRating.created_at.desc()).offset(offset).limit(limit)
    return list(session.exec(statement).all())


def app_rating_summary(session: Session) -> tuple[int, float]:
    count, average = session.exec(select(func.count(AppRating.id), func.avg(AppRating.rating))).one()
    return count, round(float(average or 0), 2)
