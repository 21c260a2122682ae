from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import pymongo
from bson import ObjectId
from pymongo import MongoClient, ReadPreference
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from .models import LookupStatus, TaskEntity, TaskLookup
from .repositories import MIN_TICK, Clock, Repository, TaskStoreError, new_task
from .schemas import TaskCreate
from .settings import DEFAULT_STORE_TIMEOUT_SECONDS, Settings
from .utils import utcnow

logger = logging.getLogger(__name__)

# $add on a date takes milliseconds
MIN_TICK_MS = int(MIN_TICK.total_seconds() * 1000)


class StoreConnectionError(RuntimeError):
    """The store could not be reached at startup."""


# PUBLIC_INTERFACE
def connect(settings: Settings) -> MongoClient:
    """
    Create the process-wide MongoDB client and verify the server answers.

    The ping is bounded by ``settings.store_timeout_seconds``.

    Raises:
        StoreConnectionError: if the client cannot be created or the ping
            fails. Callers treat this as fatal.
    """
    try:
        client: MongoClient = MongoClient(
            settings.mongodb_uri,
            server_api=ServerApi("1"),
            tz_aware=True,
            tzinfo=timezone.utc,
        )
    except PyMongoError as exc:
        logger.critical("Failed to connect to MongoDB: %s", exc)
        raise StoreConnectionError("Failed to connect to MongoDB") from exc

    try:
        with pymongo.timeout(settings.store_timeout_seconds):
            client.admin.command("ping", read_preference=ReadPreference.PRIMARY)
    except PyMongoError as exc:
        client.close()
        logger.critical("Failed to ping MongoDB: %s", exc)
        raise StoreConnectionError("Failed to ping MongoDB") from exc

    logger.info("Pinged your deployment. Connected to MongoDB database %r", settings.database_name)
    return client


# PUBLIC_INTERFACE
def get_collection(client: MongoClient, settings: Settings, name: str) -> Collection:
    """Return collection ``name`` inside the configured database of a connected client."""
    return client[settings.database_name][name]


def _field(doc: Mapping[str, Any], key: str, expected: type, default: Any = None) -> Any:
    value = doc.get(key)
    if value is None:
        # BSON null decodes like a missing field
        if default is None:
            raise KeyError(key)
        return default
    if not isinstance(value, expected):
        raise TypeError(f"field {key!r} has type {type(value).__name__}")
    return value


def _document_to_entity(doc: Mapping[str, Any]) -> TaskEntity:
    # Missing text and flag fields decode to their zero values; timestamps are required.
    return {
        "id": _field(doc, "_id", ObjectId),
        "title": _field(doc, "title", str, ""),
        "description": _field(doc, "description", str, ""),
        "completed": _field(doc, "completed", bool, False),
        "created_at": _field(doc, "created_at", datetime),
        "updated_at": _field(doc, "updated_at", datetime),
    }


def _entity_to_document(entity: TaskEntity) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "_id": entity["id"],
        "title": entity["title"],
        "completed": entity["completed"],
        "created_at": entity["created_at"],
        "updated_at": entity["updated_at"],
    }
    if entity["description"]:
        doc["description"] = entity["description"]
    return doc


class MongoTaskRepository(Repository):
    """
    Repository backed by a MongoDB collection.

    Every store call runs under ``pymongo.timeout``; the client is shared
    across request threads and needs no extra locking.
    """

    def __init__(
        self,
        collection: Collection,
        timeout: float = DEFAULT_STORE_TIMEOUT_SECONDS,
        clock: Clock = utcnow,
        client: Optional[MongoClient] = None,
    ) -> None:
        self._collection = collection
        self._timeout = timeout
        self._clock = clock
        self._client = client

    def list(self) -> List[TaskEntity]:
        try:
            with pymongo.timeout(self._timeout):
                documents = list(self._collection.find({}))
        except PyMongoError as exc:
            logger.exception("Failed to fetch tasks")
            raise TaskStoreError("Failed to fetch tasks") from exc

        try:
            return [_document_to_entity(doc) for doc in documents]
        except (KeyError, TypeError) as exc:
            logger.exception("Failed to decode tasks")
            raise TaskStoreError("Failed to decode tasks") from exc

    def get(self, task_id: ObjectId) -> TaskLookup:
        try:
            with pymongo.timeout(self._timeout):
                doc = self._collection.find_one({"_id": task_id})
        except PyMongoError:
            logger.exception("Failed to fetch task %s", task_id)
            return TaskLookup.failed("Failed to fetch task")

        if doc is None:
            return TaskLookup.not_found()
        try:
            return TaskLookup.found(_document_to_entity(doc))
        except (KeyError, TypeError):
            logger.exception("Failed to decode task %s", task_id)
            return TaskLookup.failed("Failed to fetch task")

    def create(self, data: TaskCreate) -> TaskEntity:
        entity = new_task(data, self._clock())
        try:
            with pymongo.timeout(self._timeout):
                self._collection.insert_one(_entity_to_document(entity))
        except PyMongoError as exc:
            logger.exception("Failed to create task")
            raise TaskStoreError("Failed to create task") from exc
        return entity

    def update(self, task_id: ObjectId, changes: Dict[str, Any]) -> TaskLookup:
        # Pipeline form so updated_at can be computed from the stored value;
        # $literal stops strings such as "$title" being read as field paths.
        fields: Dict[str, Any] = {key: {"$literal": value} for key, value in changes.items()}
        fields["updated_at"] = {
            "$max": [self._clock(), {"$add": ["$updated_at", MIN_TICK_MS]}],
        }
        try:
            with pymongo.timeout(self._timeout):
                result = self._collection.update_one({"_id": task_id}, [{"$set": fields}])
        except PyMongoError:
            logger.exception("Failed to update task %s", task_id)
            return TaskLookup.failed("Failed to update task")

        if result.matched_count == 0:
            return TaskLookup.not_found()

        lookup = self.get(task_id)
        if lookup.status is not LookupStatus.FOUND:
            return TaskLookup.failed("Failed to fetch updated task")
        return lookup

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
