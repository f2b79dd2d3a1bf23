from sqlmodel import Session

from app.core.errors import ValidationError
from app.models.user import User
from app.schemas.user import UserOut, UserUpdate


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        phone=user.phone,
        is_active=user.is_active,
        role=user.role,
    )


def update_user(session: Session, user: User, payload: UserUpdate) -> User:
    data = payload.model_dump(exclude_unset=True)
    full_name = data.get('full_name')
    if full_name is not None:
        if not full_name.strip():
            raise ValidationError('El nombre no puede estar vacío')
        user.full_name = full_name.strip()
    if 'phone' in data:
        user.phone = data['phone'] or None

    session.add(user)
    session.commit()
    session.refresh(user)
    return user
