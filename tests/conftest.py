import os
import tempfile
from pathlib import Path

import pytest
from sqlmodel import Session

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="urban-reports-tests-"))
TEST_DB_URL = os.getenv("TEST_DB_URL", f"sqlite:///{_TEST_ROOT / 'test.db'}")
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["STORAGE_DIR"] = str(_TEST_ROOT / "storage")
os.environ.setdefault("SECRET_KEY", "test-secret")

from app.core.config import settings
from app.db.init_db import init_db
from app.db.session import engine
from app.models.category import Category
from app.models.entity import Entity, EntityCategory
from app.models.enums import EntityStatus, UserRole
from app.services.auth_service import create_user
from app.services.storage import reset_blob_storage

settings.DATABASE_URL = TEST_DB_URL
settings.STORAGE_DIR = str(_TEST_ROOT / "storage")

PASSWORD = "secret123"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _fresh_database():
    init_db(drop_all=True)
    reset_blob_storage()
    yield
    reset_blob_storage()


@pytest.fixture
def session():
    with Session(engine) as db:
        yield db


@pytest.fixture
def category(session):
    record = Category(name="Alumbrado público", icon="lightbulb", color="#f59e0b", responsible_entity="Empresa de Energía")
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


@pytest.fixture
def other_category(session):
    record = Category(name="Vías y baches", icon="construction", color="#ef4444")
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


@pytest.fixture
def citizen(session):
    return create_user(session, "ciudadano@example.com", PASSWORD, full_name="Ana Pérez", phone="3001234567")


@pytest.fixture
def admin(session):
    return create_user(session, "admin@example.com", PASSWORD, full_name="Root", role=UserRole.ADMIN)


@pytest.fixture
def entity_user(session, category):
    """An approved entity subscribed to ``category``."""
    user = create_user(session, "entidad@example.com", PASSWORD, full_name="Empresa de Energía", role=UserRole.ENTITY)
    entity = Entity(user_id=user.id, name="Empresa de Energía", email=user.email, status=EntityStatus.APPROVED)
    session.add(entity)
    session.commit()
    session.add(EntityCategory(entity_id=entity.id, category_id=category.id))
    session.commit()
    return user
