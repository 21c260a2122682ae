from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

from bson import ObjectId

from .models import TaskEntity, TaskLookup
from .schemas import TaskCreate
from .settings import Settings, get_settings
from .utils import utcnow

Clock = Callable[[], datetime]

# Smallest step BSON dates can represent; keeps updated_at strictly increasing.
MIN_TICK = timedelta(milliseconds=1)


# PUBLIC_INTERFACE
class TaskStoreError(Exception):
    """
    A store operation failed.

    ``message`` is safe to return to clients; driver details stay in the
    chained exception and the logs.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def list(self) -> List[TaskEntity]:
        """
        Return every stored task.

        Raises:
            TaskStoreError: if the query or decoding of the results fails.
        """

    @abstractmethod
    def get(self, task_id: ObjectId) -> TaskLookup:
        """Look up a task by id."""

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskEntity:
        """
        Insert and return a new task with a generated id, completed=False
        and both timestamps set to now.

        Raises:
            TaskStoreError: if the insert fails.
        """

    @abstractmethod
    def update(self, task_id: ObjectId, changes: Dict[str, Any]) -> TaskLookup:
        """
        Apply ``changes`` plus a fresh updated_at, then return the re-fetched
        task. NOT_FOUND when no task has that id.
        """

    def close(self) -> None:
        """Release backend resources."""


def new_task(data: TaskCreate, now: datetime) -> TaskEntity:
    return {
        "id": ObjectId(),
        "title": data.title or "",
        "description": data.description or "",
        "completed": False,
        "created_at": now,
        "updated_at": now,
    }


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and local runs.
    """

    def __init__(self, clock: Clock = utcnow) -> None:
        self._lock = RLock()
        self._items: Dict[ObjectId, TaskEntity] = {}
        self._clock = clock

    def list(self) -> List[TaskEntity]:
        with self._lock:
            # Return copies to avoid external mutation
            return [t.copy() for t in self._items.values()]

    def get(self, task_id: ObjectId) -> TaskLookup:
        with self._lock:
            item = self._items.get(task_id)
            if item is None:
                return TaskLookup.not_found()
            return TaskLookup.found(item.copy())

    def create(self, data: TaskCreate) -> TaskEntity:
        entity = new_task(data, self._clock())
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def update(self, task_id: ObjectId, changes: Dict[str, Any]) -> TaskLookup:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return TaskLookup.not_found()

            updated = existing.copy()
            updated.update(changes)  # type: ignore[typeddict-item]
            updated["updated_at"] = max(self._clock(), existing["updated_at"] + MIN_TICK)
            self._items[task_id] = updated
            return TaskLookup.found(updated.copy())


# PUBLIC_INTERFACE
def get_repository(settings: Optional[Settings] = None) -> Repository:
    """
    Factory to return the configured repository based on settings.
    - memory: InMemoryRepository
    - mongodb: MongoTaskRepository, connecting (and pinging) the server first
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "memory":
        return InMemoryRepository()

    from .db import MongoTaskRepository, connect, get_collection

    client = connect(settings)
    collection = get_collection(client, settings, settings.tasks_collection)
    return MongoTaskRepository(
        collection,
        timeout=settings.store_timeout_seconds,
        client=client,
    )
