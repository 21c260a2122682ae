"""
Utility script to generate and write the OpenAPI schema for the FastAPI app.

Serializes the schema to interfaces/openapi.json (or a path given on the
command line) so that API clients and documentation tools can consume a
stable schema without running the server.

Usage:
    python -m task_api.generate_openapi [output-path]
"""
from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional

from fastapi import FastAPI

from .main import create_app, openapi_tags
from .repositories import InMemoryRepository

DEFAULT_OUTPUT = os.path.join("interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the schema carries the tag metadata for every tag in
    ``openapi_tags`` without overriding existing definitions.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(out_path: str = DEFAULT_OUTPUT, app: Optional[FastAPI] = None) -> str:
    """
    Write the OpenAPI schema of ``app`` to ``out_path``, creating parent
    directories as needed, and return the written path.

    The default app is built over an in-memory repository so no database
    connection is needed.
    """
    app = app or create_app(repository=InMemoryRepository())
    schema = app.openapi()
    _ensure_tags(schema)

    parent = os.path.dirname(out_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return out_path


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    out_path = generate_openapi(args[0] if args else DEFAULT_OUTPUT)
    print(f"Wrote OpenAPI schema to: {out_path}")


if __name__ == "__main__":
    main()
