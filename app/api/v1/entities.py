from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlmodel import Session
from app.api.v1.deps import read_uploads
from app.core.errors import ValidationError
from app.db.session import get_session
from app.models.entity import Entity
from app.schemas.entity import EntityCategoriesOut, EntityCategoriesUpdate, EntityOut
from app.services.auth_service import require_approved_entity
from app.services.entity_service import get_entity_categories, register_entity, replace_entity_categories

router = APIRouter(prefix='/entities', tags=['entities'])


def to_entity_out(session: Session, record: Entity) -> EntityOut:
    return EntityOut(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        email=record.email,
        phone=record.phone,
        nit=record.nit,
        status=record.status,
        rejection_reason=record.rejection_reason,
        rut_path=record.rut_path,
        chamber_path=record.chamber_path,
        categories=get_entity_categories(session, record),
        created_at=record.created_at,
    )


@router.post('/register', response_model=EntityOut, status_code=status.HTTP_201_CREATED)
def register_entity_endpoint(
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    phone: Optional[str] = Form(None),
    nit: Optional[str] = Form(None),
    rut: UploadFile = File(...),
    chamber: UploadFile = File(...),
    session: Session = Depends(get_session),
) -> EntityOut:
    documents = read_uploads([rut, chamber])
    if len(documents) != 2:
        raise ValidationError('Debes adjuntar el RUT y la Cámara de Comercio')
    rut_file, chamber_file = documents
    record = register_entity(
        session,
        name=name,
        email=email,
        password=password,
        phone=phone,
        nit=nit,
        rut=rut_file,
        chamber=chamber_file,
    )
    return to_entity_out(session, record)


@router.get('/me', response_model=EntityOut)
def get_my_entity(
    session: Session = Depends(get_session),
    entity: Entity = Depends(require_approved_entity),
) -> EntityOut:
    return to_entity_out(session, entity)


@router.get('/me/categories', response_model=EntityCategoriesOut)
def get_my_categories(
    session: Session = Depends(get_session),
    entity: Entity = Depends(require_approved_entity),
) -> EntityCategoriesOut:
    return EntityCategoriesOut(entity_id=entity.id, categories=get_entity_categories(session, entity))


@router.put('/me/categories', response_model=EntityCategoriesOut)
def replace_my_categories(
    payload: EntityCategoriesUpdate,
    session: Session = Depends(get_session),
    entity: Entity = Depends(require_approved_entity),
) -> EntityCategoriesOut:
    categories = replace_entity_categories(session, entity, payload.categories)
    return EntityCategoriesOut(entity_id=entity.id, categories=categories)
