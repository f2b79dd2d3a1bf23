from typing import Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.api.v1.entities import to_entity_out
from app.db.session import get_session
from app.models.enums import EntityStatus
from app.models.user import User
from app.schemas.entity import EntityAuditLogOut, EntityOut, EntityRejectRequest, EntityReviewOut
from app.services.auth_service import require_admin
from app.services.entity_service import list_audit_logs, list_entities, require_entity, review_entity

router = APIRouter(prefix='/admin', tags=['admin'])


@router.get('/entities', response_model=list[EntityOut])
def list_entities_endpoint(
    status: Optional[EntityStatus] = None,
    limit: int = 100,
    offset: int = 0,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin),
) -> list[EntityOut]:
    return [to_entity_out(session, record) for record in list_entities(session, status, limit=limit, offset=offset)]


@router.get('/entities/{entity_id}/audit-logs', response_model=list[EntityAuditLogOut])
def list_audit_logs_endpoint(
    entity_id: str,
    session: Session = Depends(get_session),
    _: User = Depends(require_admin),
) -> list[EntityAuditLogOut]:
    entity = require_entity(session, entity_id)
    return [
        EntityAuditLogOut(
            id=record.id,
            entity_id=record.entity_id,
            admin_id=record.admin_id,
            action=record.action,
            reason=record.reason,
            created_at=record.created_at,
        )
        for record in list_audit_logs(session, entity.id)
    ]


@router.post('/entities/{entity_id}/approve', response_model=EntityReviewOut)
def approve_entity_endpoint(
    entity_id: str,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
) -> EntityReviewOut:
    entity = require_entity(session, entity_id)
    record, warnings = review_entity(session, entity, admin, EntityStatus.APPROVED)
    return EntityReviewOut(entity=to_entity_out(session, record), warnings=warnings)


@router.post('/entities/{entity_id}/reject', response_model=EntityReviewOut)
def reject_entity_endpoint(
    entity_id: str,
    payload: EntityRejectRequest,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
) -> EntityReviewOut:
    entity = require_entity(session, entity_id)
    record, warnings = review_entity(session, entity, admin, EntityStatus.REJECTED, payload.reason)
    return EntityReviewOut(entity=to_entity_out(session, record), warnings=warnings)
