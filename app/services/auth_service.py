from typing import Any, Optional
from datetime import datetime, timedelta, timezone
from uuid import uuid4
from jose import JWTError, jwt
from loguru import logger
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session, select
from app.core.config import settings
from app.db.session import get_session
from app.models.entity import Entity
from app.models.enums import EntityStatus, UserRole
from app.models.refresh_token import RefreshToken
from app.models.user import User

pwd_context = CryptContext(schemes=['bcrypt'], deprecated='auto')
security = HTTPBearer()

PENDING_ENTITY_DETAIL = 'Tu cuenta está pendiente de aprobación por un administrador.'


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return pwd_context.verify(password, hashed_password)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def _create_token(subject: str, token_type: str, expires_delta: timedelta, **claims: Any) -> str:
    issued_at = datetime.now(timezone.utc)
    payload = {'sub': subject, 'type': token_type, 'iat': issued_at, 'exp': issued_at + expires_delta, **claims}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _decode_token(token: str, expected_type: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise _unauthorized('Token inválido') from exc
    if payload.get('type') != expected_type:
        raise _unauthorized('Tipo de token inválido')
    return payload


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)


def create_access_token(user: User) -> str:
    role = user.role.value if isinstance(user.role, UserRole) else str(user.role)
    return _create_token(user.id, 'access', timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES), role=role)


def create_refresh_token(user_id: str) -> tuple[str, datetime]:
    lifetime = timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)
    expires_at = datetime.now(timezone.utc) + lifetime
    return _create_token(user_id, 'refresh', lifetime, jti=uuid4().hex), expires_at


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == email)).first()


def get_user(session: Session, user_id: str) -> Optional[User]:
    return session.exec(select(User).where(User.id == user_id)).first()


def create_user(
    session: Session,
    email: str,
    password: str,
    full_name: str = '',
    phone: Optional[str] = None,
    role: UserRole = UserRole.CITIZEN,
    commit: bool = True,
) -> User:
    """Insert a user; with ``commit=False`` the row is only flushed so callers can bundle it."""
    user = User(email=email, hashed_password=hash_password(password), full_name=full_name, phone=phone, role=role)
    session.add(user)
    if not commit:
        session.flush()
        return user
    session.commit()
    session.refresh(user)
    logger.info('auth.user_created', user_id=user.id, role=role.value)
    return user


def authenticate_user(session: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(session, email)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


def get_linked_entity(session: Session, user: User) -> Optional[Entity]:
    if user.role != UserRole.ENTITY:
        return None
    return session.exec(select(Entity).where(Entity.user_id == user.id)).first()


def ensure_can_sign_in(session: Session, user: User) -> None:
    """Refuse sign-in for inactive accounts and for entities not yet approved."""
    if not user.is_active:
        raise _forbidden('Cuenta inactiva')
    if user.role != UserRole.ENTITY:
        return
    entity = get_linked_entity(session, user)
    if entity is None or entity.status == EntityStatus.PENDING:
        logger.info('auth.entity_pending', user_id=user.id)
        raise _forbidden(PENDING_ENTITY_DETAIL)
    if entity.status == EntityStatus.REJECTED:
        logger.info('auth.entity_rejected', user_id=user.id, entity_id=entity.id)
        raise _forbidden(f'Tu solicitud fue rechazada: {entity.rejection_reason or "Sin motivo"}')


def store_refresh_token(session: Session, token: str, user_id: str, expires_at: datetime) -> None:
    session.add(RefreshToken(token=token, user_id=user_id, expires_at=expires_at))
    session.commit()


def revoke_refresh_token(session: Session, token: str) -> None:
    record = session.exec(select(RefreshToken).where(RefreshToken.token == token)).first()
    if record:
        session.delete(record)
        session.commit()


def validate_refresh_token(session: Session, token: str) -> str:
    payload = _decode_token(token, 'refresh')
    record = session.exec(select(RefreshToken).where(RefreshToken.token == token)).first()
    if not record:
        raise _unauthorized('Sesión revocada')
    if _as_utc(record.expires_at) < datetime.now(timezone.utc):
        session.delete(record)
        session.commit()
        raise _unauthorized('Sesión expirada')
    return payload.get('sub')


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: Session = Depends(get_session),
) -> User:
    payload = _decode_token(credentials.credentials, 'access')
    user = get_user(session, payload.get('sub'))
    if not user:
        raise _unauthorized('Usuario no encontrado')
    if not user.is_active:
        raise _forbidden('Cuenta inactiva')
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN:
        raise _forbidden('Solo administradores')
    return user


def require_citizen(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.CITIZEN:
        raise _forbidden('Solo ciudadanos')
    return user


def require_approved_entity(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> Entity:
    entity = get_linked_entity(session, user)
    if entity is None or entity.status != EntityStatus.APPROVED:
        raise _forbidden('Solo entidades aprobadas')
    return entity
