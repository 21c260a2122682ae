from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, TypedDict

from bson import ObjectId


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A lightweight domain model representing a stored task.

    Fields:
    - id: ObjectId assigned on insert, never changed afterwards
    - title: Short title, non-empty at creation
    - description: Optional detailed description ('' when absent)
    - completed: Boolean completion flag
    - created_at: UTC creation timestamp (millisecond precision)
    - updated_at: UTC last update timestamp (millisecond precision)
    """

    id: ObjectId
    title: str
    description: str
    completed: bool
    created_at: datetime
    updated_at: datetime


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class TaskLookup:
    """
    Result of fetching a single task.

    ``task`` is set only for FOUND; ``error`` holds a client-safe message
    only for FAILED.
    """

    status: LookupStatus
    task: Optional[TaskEntity] = None
    error: Optional[str] = None

    @classmethod
    def found(cls, task: TaskEntity) -> "TaskLookup":
        return cls(LookupStatus.FOUND, task=task)

    @classmethod
    def not_found(cls) -> "TaskLookup":
        return cls(LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: str) -> "TaskLookup":
        return cls(LookupStatus.FAILED, error=error)
