from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENABLE_SCHEDULER", "false")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from chest_api.core.db import Base
from chest_api.core.security import CurrentUser
from chest_api.deps import get_current_user, get_db, require_role
from chest_api.main import app
from chest_api.models import Chest, ChestEntry, Item


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user():
    return CurrentUser(id="1001", username="tester")


@pytest.fixture
def make_item(db):
    def _make(name, catalog_id=None, **fields):
        item = Item(name=name, catalog_id=catalog_id, **fields)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item
    return _make


@pytest.fixture
def make_chest(db):
    def _make(name, *entries):
        """entries: (catalog_id, item_id, quantity) tuples"""
        chest = Chest(name=name)
        for catalog_id, item_id, quantity in entries:
            chest.entries.append(ChestEntry(catalog_id=catalog_id, item_id=item_id, quantity=quantity))
        db.add(chest)
        db.commit()
        db.refresh(chest)
        return chest
    return _make


@pytest.fixture
def anon_client(db):
    """Real token checks, test database."""
    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(db, user):
    """Authenticated caller holding the required role."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[require_role] = lambda: user
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
