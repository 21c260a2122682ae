from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from bson import ObjectId
from bson.errors import InvalidId


# PUBLIC_INTERFACE
def utcnow() -> datetime:
    """
    Current UTC time truncated to milliseconds.

    BSON dates only keep millisecond precision, so values produced here
    survive a round trip through MongoDB unchanged.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


# PUBLIC_INTERFACE
def parse_task_id(raw: str) -> Optional[ObjectId]:
    """
    Parse a path parameter into an ObjectId.

    Returns:
        The ObjectId, or None when ``raw`` is not a 24 character hex string.
    """
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError):
        return None


# PUBLIC_INTERFACE
def tasks_envelope(items: Union[Sequence[Any], Iterable[Any]]) -> Dict[str, Any]:
    """
    Build the list response body.

    Args:
        items: The tasks returned by the store.

    Returns:
        Dict with keys: tasks, count (the number of tasks returned).
    """
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    return {
        "tasks": materialized,
        "count": len(materialized),
    }
