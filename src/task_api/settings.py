from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

DEFAULT_STORE_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - MONGODB_URI: MongoDB connection string. Default 'mongodb://localhost:27017'
    - DATABASE_NAME: database holding the tasks collection. Default 'taskmanager'
    - TASKS_COLLECTION: collection name for task documents. Default 'tasks'
    - STORE_TIMEOUT_SECONDS: per-call store timeout in seconds. Default 10
    - PERSISTENCE_BACKEND: 'mongodb' (default) or 'memory'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level name. Default 'INFO'
    - HOST / PORT: bind address for the HTTP server. Default 0.0.0.0:8000
    """

    mongodb_uri: str = "mongodb://localhost:27017"
    database_name: str = "taskmanager"
    tasks_collection: str = "tasks"
    store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS
    persistence_backend: str = "mongodb"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_timeout(value: str, default: float = DEFAULT_STORE_TIMEOUT_SECONDS) -> float:
    try:
        seconds = float(value)
    except ValueError:
        return default
    return seconds if seconds > 0 else default


def _parse_port(value: str, default: int = 8000) -> int:
    try:
        return int(value)
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "mongodb").strip().lower()
    if backend not in {"mongodb", "memory"}:
        backend = "mongodb"

    return Settings(
        mongodb_uri=_get_env("MONGODB_URI", "mongodb://localhost:27017").strip(),
        database_name=_get_env("DATABASE_NAME", "taskmanager").strip(),
        tasks_collection=_get_env("TASKS_COLLECTION", "tasks").strip(),
        store_timeout_seconds=_parse_timeout(_get_env("STORE_TIMEOUT_SECONDS", "10")),
        persistence_backend=backend,
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_port(_get_env("PORT", "8000")),
    )
