import io
import os

# Settings are read at import time; point them at throwaway resources first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "DEBUG"

from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

import localgov.models  # noqa: F401
from localgov.core.ratelimit import limiter
from localgov.db.base import Base
from localgov.db.session import SessionLocal, engine
from localgov.models.user import User, UserRole
from localgov.services.storage import LocalDiskStorage
from localgov.services.upload_planner import IncomingFile

limiter.enabled = False


def _make_file(
    name: str | None,
    data: bytes = b"\xff\xd8\xff\xe0 jpeg bytes",
    content_type: str = "image/jpeg",
) -> IncomingFile:
    return IncomingFile(filename=name, content_type=content_type, size=len(data), stream=io.BytesIO(data))


@pytest.fixture()
def make_file():
    """Factory for in-memory client files."""
    return _make_file


@pytest.fixture()
def storage(tmp_path: Path) -> LocalDiskStorage:
    return LocalDiskStorage(tmp_path)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture()
def reporter(db_session: Session) -> User:
    user = User(
        email="resident@example.com",
        name="Resident",
        hashed_password="not-a-real-hash",
        role=UserRole.citizen,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user
