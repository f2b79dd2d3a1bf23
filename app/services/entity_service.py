from typing import Optional
from loguru import logger
from sqlmodel import Session, select
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.entity import Entity, EntityAuditLog, EntityCategory
from app.models.enums import EntityStatus, UserRole
from app.models.report import Report
from app.models.user import User
from app.services.auth_service import create_user, get_user_by_email
from app.services.category_service import get_categories_by_ids
from app.services.events import EntityReviewed
from app.services.storage import BlobStorage, IncomingFile, build_object_path, get_blob_storage
from app.services.subscribers import get_event_bus


def _discard_documents(storage: BlobStorage, paths: list[str]) -> None:
    for path in paths:
        try:
            storage.delete(path)
        except Exception as exc:  # noqa: BLE001
            logger.warning('entity.document_cleanup_failed', path=path, error=str(exc))


def register_entity(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    phone: Optional[str],
    nit: Optional[str],
    rut: IncomingFile,
    chamber: IncomingFile,
) -> Entity:
    if not name.strip():
        raise ValidationError('El nombre de la entidad es obligatorio')
    if len(password) < 6:
        raise ValidationError('La contraseña debe tener al menos 6 caracteres')
    if not rut.data or not chamber.data:
        raise ValidationError('Debes adjuntar el RUT y la Cámara de Comercio')
    if get_user_by_email(session, email):
        raise ConflictError('El correo ya está registrado')

    user = create_user(session, email, password, full_name=name.strip(), phone=phone, role=UserRole.ENTITY, commit=False)
    storage = get_blob_storage()
    owner = f'entities/{user.id}'
    uploaded: list[str] = []
    try:
        for document in (rut, chamber):
            path = build_object_path(owner, document.filename)
            storage.upload(path, document.data, document.content_type)
            uploaded.append(path)
        rut_path, chamber_path = uploaded
        entity = Entity(
            user_id=user.id,
            name=name.strip(),
            email=email,
            phone=phone,
            nit=nit,
            status=EntityStatus.PENDING,
            rut_path=rut_path,
            chamber_path=chamber_path,
        )
        session.add(entity)
        session.commit()
    except Exception:
        session.rollback()
        _discard_documents(storage, uploaded)
        raise
    session.refresh(entity)
    logger.info('entity.registered', entity_id=entity.id, user_id=user.id)
    return entity


def get_entity(session: Session, entity_id: str) -> Optional[Entity]:
    return session.exec(select(Entity).where(Entity.id == entity_id)).first()


def require_entity(session: Session, entity_id: str) -> Entity:
    record = get_entity(session, entity_id)
    if not record:
        raise NotFoundError('Entidad no encontrada')
    return record


def get_entity_for_user(session: Session, user: User) -> Optional[Entity]:
    return session.exec(select(Entity).where(Entity.user_id == user.id)).first()


def list_entities(
    session: Session,
    status: Optional[EntityStatus] = None,
    limit: Optional[int] = 100,
    offset: int = 0,
) -> list[Entity]:
    statement = select(Entity).order_by(Entity.created_at.desc())
    if status is not None:
        statement = statement.where(Entity.status == status)
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def get_entity_categories(session: Session, entity: Entity) -> list[str]:
    statement = (
        select(EntityCategory.category_id)
        .where(EntityCategory.entity_id == entity.id)
        .order_by(EntityCategory.created_at)
    )
    return list(session.exec(statement).all())


def replace_entity_categories(session: Session, entity: Entity, category_ids: list[str]) -> list[str]:
    if len(set(category_ids)) != len(category_ids):
        raise ConflictError('Categorías duplicadas en la suscripción')
    known = get_categories_by_ids(session, category_ids)
    missing = [category_id for category_id in category_ids if category_id not in known]
    if missing:
        raise NotFoundError(f"Categorías no encontradas: {', '.join(missing)}")

    current = session.exec(select(EntityCategory).where(EntityCategory.entity_id == entity.id)).all()
    for record in current:
        session.delete(record)
    session.flush()
    for category_id in category_ids:
        session.add(EntityCategory(entity_id=entity.id, category_id=category_id))
    session.commit()
    logger.info('entity.categories_replaced', entity_id=entity.id, count=len(category_ids))
    return list(category_ids)


def is_report_visible(report: Report, category_ids: set[str] | list[str]) -> bool:
    return report.category_id in set(category_ids)


def review_entity(
    session: Session,
    entity: Entity,
    admin: User,
    decision: EntityStatus,
    reason: Optional[str] = None,
) -> tuple[Entity, list[str]]:
    if decision not in (EntityStatus.APPROVED, EntityStatus.REJECTED):
        raise ValidationError('Decisión inválida')
    cleaned = (reason or '').strip() or None
    if decision == EntityStatus.REJECTED and not cleaned:
        raise ValidationError('El motivo de rechazo es obligatorio')
    if entity.status != EntityStatus.PENDING:
        raise ConflictError(f'La entidad ya fue revisada ({entity.status.value})')

    entity.status = decision
    entity.rejection_reason = cleaned if decision == EntityStatus.REJECTED else None
    session.add(entity)
    session.add(
        EntityAuditLog(
            entity_id=entity.id,
            admin_id=admin.id,
            action=decision,
            reason=entity.rejection_reason,
        )
    )
    session.commit()
    session.refresh(entity)
    logger.info('entity.reviewed', entity_id=entity.id, admin_id=admin.id, decision=decision.value)

    warnings = get_event_bus().publish(
        session,
        EntityReviewed(
            entity_id=entity.id,
            user_id=entity.user_id,
            decision=decision,
            reason=entity.rejection_reason,
        ),
    )
    return entity, warnings


def list_audit_logs(session: Session, entity_id: str) -> list[EntityAuditLog]:
    statement = (
        select(EntityAuditLog)
        .where(EntityAuditLog.entity_id == entity_id)
        .order_by(EntityAuditLog.created_at.desc())
    )
    return list(session.exec(statement).all())
