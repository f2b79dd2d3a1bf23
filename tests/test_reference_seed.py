import json
from pathlib import Path

import pytest
from sqlmodel import Session, select

from app.db.init_db import init_db
from app.db.session import engine
from app.models.category import Category
from app.models.enums import UserRole
from app.models.user import User
from app.services.reference_seed import (
    DEFAULT_PRESETS_PATH,
    ensure_admin_user,
    load_presets,
    seed_categories,
)


def test_seed_categories_creates_updates_and_skips(tmp_path: Path):
    init_db(drop_all=True)
    payload = {
        "categories": [
            {"name": "Alumbrado público", "icon": "lightbulb", "color": "#f59e0b"},
            {"name": "Vías y baches", "icon": "construction"},
        ]
    }
    preset_path = tmp_path / "categories.json"
    preset_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")

    with Session(engine) as session:
        first = seed_categories(session, load_presets(preset_path))
    assert (first.created, first.updated, first.skipped) == (2, 0, 0)

    payload["categories"][1]["color"] = "#ef4444"
    preset_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    with Session(engine) as session:
        second = seed_categories(session, load_presets(preset_path))
    assert (second.created, second.updated, second.skipped) == (0, 1, 1)

    with Session(engine) as session:
        vias = session.exec(select(Category).where(Category.name == "Vías y baches")).one()
        assert vias.color == "#ef4444"


def test_default_presets_are_valid():
    presets = load_presets(DEFAULT_PRESETS_PATH)
    assert len(presets) >= 6
    assert all(item.responsible_entity for item in presets)


def test_load_presets_rejects_nameless_entries(tmp_path: Path):
    preset_path = tmp_path / "bad.json"
    preset_path.write_text(json.dumps([{"icon": "x"}]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_presets(preset_path)


def test_ensure_admin_user_creates_and_promotes():
    init_db(drop_all=True)
    with Session(engine) as session:
        admin, generated = ensure_admin_user(session, "jefe@example.com")
        assert admin.role == UserRole.ADMIN
        assert generated

        again, generated_again = ensure_admin_user(session, "jefe@example.com")
        assert again.id == admin.id
        assert generated_again is None

        session.add(User(email="vecino@example.com", hashed_password="x", role=UserRole.CITIZEN))
        session.commit()
        promoted, _ = ensure_admin_user(session, "vecino@example.com", "secret123")
        assert promoted.role == UserRole.ADMIN
