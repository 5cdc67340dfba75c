"""
Shared fixtures: an in-memory SQLite metrics store and a seeded tenant.
"""

from __future__ import annotations

import os

os.environ.setdefault("APP_MODE", "local")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.services.csv_upload_service import CSVUploadService
from db import models as _models  # noqa: F401 - registers all ORM models on Base.metadata
from db.base import Base
from db.models.user_profile import UserProfile
from db.session import build_session_factory


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return build_session_factory(engine)


@pytest.fixture()
def db(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def owner(db: Session) -> UserProfile:
    profile = UserProfile(
        external_user_id="test_user_123",
        email="test@example.com",
        name="Test User",
        onboarding_completed=True,
    )
    db.add(profile)
    db.commit()
    return profile


@pytest.fixture()
def upload_service() -> CSVUploadService:
    return CSVUploadService(max_returned_errors=10, log_row_errors=True)
