"""Post-commit events for report and entity mutations.

Subscribers run after the primary write has been committed. Each subscriber
is isolated: a failure is logged, the session is rolled back to a clean
state, and the failure is returned to the publisher as a warning.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger
from sqlmodel import Session

from app.core.errors import SideEffectFailure
from app.models.enums import EntityStatus, ReportStatus, UserRole
from app.services.storage import IncomingFile


@dataclass(frozen=True)
class Actor:
    user_id: str
    display_name: str
    role: UserRole


@dataclass(frozen=True)
class ReportStatusChanged:
    report_id: str
    tracking_code: str
    owner_id: Optional[str]
    old_status: ReportStatus
    new_status: ReportStatus
    address: str
    actor: Actor


@dataclass(frozen=True)
class EvidenceSubmitted:
    report_id: str
    status: ReportStatus
    actor: Actor
    files: list[IncomingFile] = field(default_factory=list)


@dataclass(frozen=True)
class EntityReviewed:
    entity_id: str
    user_id: str
    decision: EntityStatus
    reason: Optional[str]


Handler = Callable[[Session, object], Optional[list[str]]]


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def handlers_for(self, event_type: type) -> list[Handler]:
        return list(self._handlers.get(event_type, []))

    def publish(self, session: Session, event: object) -> list[str]:
        warnings: list[str] = []
        for handler in self.handlers_for(type(event)):
            name = getattr(handler, '__name__', repr(handler))
            try:
                partial = handler(session, event)
            except Exception as exc:  # noqa: BLE001
                session.rollback()
                failure = SideEffectFailure(f'{name} failed: {exc}')
                logger.warning(
                    'events.handler_failed',
                    handler=name,
                    event=type(event).__name__,
                    report_id=getattr(event, 'report_id', None),
                    error=str(exc),
                )
                warnings.append(failure.message)
                continue
            if partial:
                warnings.extend(partial)
        return warnings
