"""
Process entrypoint: ``python -m task_api`` or the ``task-api`` script.

The store connection is made by the app lifespan, so a MongoDB server that
does not answer the startup ping stops the process before it listens.
"""
from __future__ import annotations

import uvicorn

from .settings import get_settings


# PUBLIC_INTERFACE
def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "task_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
