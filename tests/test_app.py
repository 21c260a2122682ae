import json

import pytest
from fastapi.testclient import TestClient

from task_api import main
from task_api.db import StoreConnectionError
from task_api.generate_openapi import generate_openapi
from task_api.repositories import InMemoryRepository
from task_api.settings import Settings


@pytest.fixture()
def quiet_logging(monkeypatch):
    monkeypatch.setattr(main, "setup_logging", lambda level: None)


def test_lifespan_builds_repository_from_settings(quiet_logging):
    app = main.create_app(settings=Settings(persistence_backend="memory"))
    with TestClient(app) as client:
        assert isinstance(app.state.repository, InMemoryRepository)
        res = client.post("/api/tasks/", json={"title": "Started"})
        assert res.status_code == 201


def test_startup_fails_when_store_is_unreachable(quiet_logging, monkeypatch):
    def unreachable(settings):
        raise StoreConnectionError("Failed to ping MongoDB")

    monkeypatch.setattr(main, "get_repository", unreachable)
    app = main.create_app(settings=Settings())
    with pytest.raises(StoreConnectionError):
        with TestClient(app):
            pass


def test_generate_openapi_writes_schema(tmp_path):
    out = generate_openapi(str(tmp_path / "interfaces" / "openapi.json"))
    with open(out, encoding="utf-8") as f:
        schema = json.load(f)
    assert "/api/tasks/" in schema["paths"]
    assert {"get", "patch", "put"} <= set(schema["paths"]["/api/tasks/{task_id}"])
    assert {t["name"] for t in schema["tags"]} >= {"health", "tasks"}


def test_setup_logging_replaces_root_handlers():
    import logging

    from task_api.logging_setup import DATE_FORMAT, LOG_FORMAT, setup_logging

    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("debug")
        setup_logging("DEBUG")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].formatter._fmt == LOG_FORMAT
        assert LOG_FORMAT == "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
        assert root.handlers[0].formatter.datefmt == DATE_FORMAT
        assert logging.getLogger("pymongo").level == logging.INFO
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
