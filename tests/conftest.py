from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from task_api.main import create_app
from task_api.repositories import InMemoryRepository
from task_api.settings import Settings

from .fakes import TickingClock


@pytest.fixture()
def settings() -> Settings:
    return Settings(persistence_backend="memory")


@pytest.fixture()
def repo() -> InMemoryRepository:
    """In-memory store with a clock that moves forward one second per call."""
    return InMemoryRepository(clock=TickingClock())


@pytest.fixture()
def client(repo: InMemoryRepository, settings: Settings) -> TestClient:
    return TestClient(create_app(repository=repo, settings=settings))
