import pytest

from task_api.settings import get_settings

ENV_VARS = [
    "MONGODB_URI",
    "DATABASE_NAME",
    "TASKS_COLLECTION",
    "STORE_TIMEOUT_SECONDS",
    "PERSISTENCE_BACKEND",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
    "HOST",
    "PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = get_settings()
    assert s.mongodb_uri == "mongodb://localhost:27017"
    assert s.database_name == "taskmanager"
    assert s.tasks_collection == "tasks"
    assert s.store_timeout_seconds == 10.0
    assert s.persistence_backend == "mongodb"
    assert s.cors_allow_origins == ["*"]
    assert s.log_level == "INFO"
    assert s.port == 8000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MONGODB_URI", "mongodb://mongo:27017")
    monkeypatch.setenv("DATABASE_NAME", "tasks_prod")
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("PERSISTENCE_BACKEND", "Memory")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.example, http://b.example")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = get_settings()
    assert s.mongodb_uri == "mongodb://mongo:27017"
    assert s.database_name == "tasks_prod"
    assert s.store_timeout_seconds == 2.5
    assert s.persistence_backend == "memory"
    assert s.cors_allow_origins == ["http://a.example", "http://b.example"]
    assert s.log_level == "DEBUG"


def test_empty_values_fall_back(monkeypatch):
    monkeypatch.setenv("MONGODB_URI", "")
    monkeypatch.setenv("DATABASE_NAME", "")
    s = get_settings()
    assert s.mongodb_uri == "mongodb://localhost:27017"
    assert s.database_name == "taskmanager"


@pytest.mark.parametrize("raw", ["abc", "0", "-4"])
def test_invalid_timeout_uses_default(monkeypatch, raw):
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", raw)
    assert get_settings().store_timeout_seconds == 10.0


def test_unknown_backend_falls_back_to_mongodb(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
    assert get_settings().persistence_backend == "mongodb"
