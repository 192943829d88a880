from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from foodchain.services.api import create_app
from foodchain.services.settings import Settings
from foodchain.services.status_store import StatusStore


@pytest.fixture
def status() -> StatusStore:
    return StatusStore()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        db_path=str(tmp_path / "data" / "db.json"),
        client_dist=str(tmp_path / "no-client-build"),
    )


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))
