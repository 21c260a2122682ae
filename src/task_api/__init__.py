"""
Task Manager API package.

Exposes the FastAPI application factory and the default app instance
(import path: task_api.app).
"""

from .main import app, create_app  # noqa: F401
