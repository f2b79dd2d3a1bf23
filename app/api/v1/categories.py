from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.db.session import get_session
from app.models.category import Category
from app.schemas.category import CategoryOut
from app.services.category_service import list_categories, require_category

router = APIRouter(prefix='/categories', tags=['categories'])


def _to_category_out(record: Category) -> CategoryOut:
    return CategoryOut(
        id=record.id,
        name=record.name,
        icon=record.icon,
        color=record.color,
        responsible_entity=record.responsible_entity,
        is_active=record.is_active,
    )


@router.get('', response_model=list[CategoryOut])
def list_categories_endpoint(session: Session = Depends(get_session)) -> list[CategoryOut]:
    return [_to_category_out(record) for record in list_categories(session)]


@router.get('/{category_id}', response_model=CategoryOut)
def get_category_endpoint(category_id: str, session: Session = Depends(get_session)) -> CategoryOut:
    return _to_category_out(require_category(session, category_id))
