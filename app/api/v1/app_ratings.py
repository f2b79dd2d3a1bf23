from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from app.db.session import get_session
from app.models.app_rating import AppRating
from app.models.user import User
from app.schemas.app_rating import AppRatingCreate, AppRatingOut, AppRatingSummary
from app.services.app_rating_service import app_rating_summary, list_app_ratings, rate_platform
from app.services.auth_service import get_current_user, require_admin

router = APIRouter(prefix='/app-ratings', tags=['app-ratings'])


def _to_app_rating_out(record: AppRating) -> AppRatingOut:
    return AppRatingOut(
        id=record.id,
        user_id=record.user_id,
        rating=record.rating,
        comment=record.comment,
        created_at=record.created_at,
    )


@router.post('', response_model=AppRatingOut, status_code=status.HTTP_201_CREATED)
def rate_platform_endpoint(
    payload: AppRatingCreate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> AppRatingOut:
    return _to_app_rating_out(rate_platform(session, user, payload.rating, payload.comment))


@router.get('', response_model=list[AppRatingOut])
def list_app_ratings_endpoint(
    limit: int = 100,
    offset: int = 0,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin),
) -> list[AppRatingOut]:
    return [_to_app_rating_out(record) for record in list_app_ratings(session, limit=limit, offset=offset)]


@router.get('/summary', response_model=AppRatingSummary)
def app_rating_summary_endpoint(
    session: Session = Depends(get_session),
    _: User = Depends(require_admin),
) -> AppRatingSummary:
    count, average = app_rating_summary(session)
    return AppRatingSummary(count=count, average=average)
