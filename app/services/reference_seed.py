from __future__ import annotations

import json
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from sqlmodel import Session, select

from app.models.category import Category
from app.models.enums import UserRole
from app.models.user import User
from app.services.auth_service import create_user, get_user_by_email


SYSTEM_ADMIN_EMAIL = 'admin@reportes.example.com'
DEFAULT_PRESETS_PATH = Path(__file__).resolve().parents[2] / 'presets' / 'categories.json'


@dataclass(frozen=True)
class PresetCategory:
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    responsible_entity: Optional[str] = None


@dataclass(frozen=True)
class SeedSummary:
    created: int
    updated: int
    skipped: int


def ensure_admin_user(session: Session, email: str, password: Optional[str] = None) -> tuple[User, Optional[str]]:
    """Return the admin account for ``email``, creating or promoting it as needed.

    The generated password is returned only when the account was created
    without an explicit one.
    """
    record = get_user_by_email(session, email)
    if record:
        if record.role != UserRole.ADMIN:
            record.role = UserRole.ADMIN
            session.add(record)
            session.commit()
            session.refresh(record)
        return record, None
    generated = None
    if not password:
        generated = secrets.token_urlsafe(18)
        password = generated
    record = create_user(session, email, password, full_name='Administrador', role=UserRole.ADMIN)
    return record, generated


def _parse_payload(raw: Any) -> list[PresetCategory]:
    if isinstance(raw, dict):
        items = raw.get('categories', [])
    else:
        items = raw
    if not isinstance(items, list):
        raise ValueError('preset categories must be a list or {categories: []}')
    presets: list[PresetCategory] = []
    for item in items:
        if not isinstance(item, dict):
            raise ValueError('each preset category must be an object')
        name = str(item.get('name', '')).strip()
        if not name:
            raise ValueError('preset category requires a name')
        presets.append(
            PresetCategory(
                name=name,
                icon=item.get('icon') or None,
                color=item.get('color') or None,
                responsible_entity=item.get('responsible_entity') or None,
            )
        )
    return presets


def load_presets(path: Path = DEFAULT_PRESETS_PATH) -> list[PresetCategory]:
    payload = json.loads(path.read_text(encoding='utf-8'))
    return _parse_payload(payload)


def seed_categories(session: Session, presets: Iterable[PresetCategory]) -> SeedSummary:
    created = 0
    updated = 0
    skipped = 0
    for preset in presets:
        existing = session.exec(select(Category).where(Category.name == preset.name)).first()
        if not existing:
            session.add(
                Category(
                    name=preset.name,
                    icon=preset.icon,
                    color=preset.color,
                    responsible_entity=preset.responsible_entity,
                )
            )
            created += 1
            continue
        current = (existing.icon, existing.color, existing.responsible_entity)
        wanted = (preset.icon, preset.color, preset.responsible_entity)
        if current == wanted:
            skipped += 1
            continue
        existing.icon, existing.color, existing.responsible_entity = wanted
        session.add(existing)
        updated += 1
    session.commit()
    return SeedSummary(created=created, updated=updated, skipped=skipped)
