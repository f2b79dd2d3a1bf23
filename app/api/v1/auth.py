from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session
from app.core.errors import ConflictError
from app.db.session import get_session
from app.models.user import User
from app.schemas.auth import LoginRequest, LogoutRequest, RefreshRequest, RegisterRequest, TokenResponse
from app.schemas.user import UserOut
from app.services.auth_service import (
    authenticate_user,
    create_access_token,
    create_refresh_token,
    create_user,
    ensure_can_sign_in,
    get_user,
    get_user_by_email,
    revoke_refresh_token,
    store_refresh_token,
    validate_refresh_token,
)
from app.services.user_service import to_user_out

router = APIRouter(prefix='/auth', tags=['auth'])


def _issue_tokens(session: Session, user: User) -> TokenResponse:
    refresh_token, expires_at = create_refresh_token(user.id)
    store_refresh_token(session, refresh_token, user.id, expires_at)
    return TokenResponse(access_token=create_access_token(user), refresh_token=refresh_token)


@router.post('/register', response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, session: Session = Depends(get_session)) -> UserOut:
    """Citizen self-registration; entities sign up through ``/entities/register``."""
    if get_user_by_email(session, payload.email):
        raise ConflictError('El correo ya está registrado')
    user = create_user(session, payload.email, payload.password, full_name=payload.full_name.strip(), phone=payload.phone)
    return to_user_out(user)


@router.post('/login', response_model=TokenResponse)
def login(payload: LoginRequest, session: Session = Depends(get_session)) -> TokenResponse:
    user = authenticate_user(session, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Credenciales incorrectas')
    ensure_can_sign_in(session, user)
    return _issue_tokens(session, user)


@router.post('/refresh', response_model=TokenResponse)
def refresh(payload: RefreshRequest, session: Session = Depends(get_session)) -> TokenResponse:
    user = get_user(session, validate_refresh_token(session, payload.refresh_token))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Usuario no encontrado')
    ensure_can_sign_in(session, user)
    revoke_refresh_token(session, payload.refresh_token)
    return _issue_tokens(session, user)


@router.post('/logout')
def logout(payload: LogoutRequest, session: Session = Depends(get_session)) -> dict:
    revoke_refresh_token(session, payload.refresh_token)
    return {'status': 'ok'}
