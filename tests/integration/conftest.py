from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from localgov.main import app
from localgov.routers.issues import get_storage
from localgov.services.storage import LocalDiskStorage


@pytest.fixture()
def client(db_session: Session, tmp_path: Path) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_storage] = lambda: LocalDiskStorage(tmp_path)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
