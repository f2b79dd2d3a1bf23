from typing import Optional
from sqlmodel import Session, select
from app.core.errors import NotFoundError
from app.models.category import Category


def list_categories(session: Session, active_only: bool = True) -> list[Category]:
    statement = select(Category).order_by(Category.name)
    if active_only:
        statement = statement.where(Category.is_active.is_(True))
    return list(session.exec(statement).all())


def get_category(session: Session, category_id: str) -> Optional[Category]:
    return session.exec(select(Category).where(Category.id == category_id)).first()


def require_category(session: Session, category_id: str) -> Category:
    record = get_category(session, category_id)
    if not record:
        raise NotFoundError('Categoría no encontrada')
    return record


def get_categories_by_ids(session: Session, category_ids: list[str]) -> dict[str, Category]:
    if not category_ids:
        return {}
    records = session.exec(select(Category).where(Category.id.in_(category_ids))).all()
    return {record.id: record for record in records}
