from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from .models import TaskEntity


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new task.

    ``title`` is checked for presence by the handler rather than by the
    schema so that an empty title and a malformed body report different
    errors.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Two litres, semi-skimmed",
            }
        }
    )

    title: Optional[StrictStr] = Field(default=None, description="Short title for the task (required)")
    description: Optional[StrictStr] = Field(default=None, description="Optional detailed description")


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for partially updating an existing task.
    All fields are optional; only provided fields will be updated. Strict
    types keep "yes" or 1 from passing as a boolean.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy oat milk",
                "completed": True,
            }
        }
    )

    title: Optional[StrictStr] = Field(default=None, description="New title; ignored when empty")
    description: Optional[StrictStr] = Field(default=None, description="New description; ignored when empty")
    completed: Optional[StrictBool] = Field(
        default=None,
        description="Completion status flag; omit to leave unchanged",
    )

    def changes(self) -> Dict[str, Any]:
        """
        Return the store fields this update applies.

        Empty strings are skipped, so title and description cannot be
        cleared through an update. ``completed`` is applied whenever it was
        given, including an explicit false.
        """
        fields: Dict[str, Any] = {}
        if self.title:
            fields["title"] = self.title
        if self.description:
            fields["description"] = self.description
        if self.completed is not None:
            fields["completed"] = self.completed
        return fields


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "6710d1a8c2f4a7b1e3d5f901",
                "title": "Buy milk",
                "completed": False,
                "created_at": "2026-10-19T10:15:30.123000Z",
                "updated_at": "2026-10-19T10:15:30.123000Z",
            }
        }
    )

    id: Optional[str] = Field(default=None, description="Unique identifier (24 hex characters)")
    title: str = Field(..., description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last update timestamp (UTC)")

    @classmethod
    def from_entity(cls, entity: TaskEntity) -> "TaskOut":
        return cls(
            id=str(entity["id"]) if entity.get("id") else None,
            title=entity["title"],
            description=entity.get("description") or None,
            completed=entity["completed"],
            created_at=entity["created_at"],
            updated_at=entity["updated_at"],
        )


# PUBLIC_INTERFACE
class TaskList(BaseModel):
    """
    Envelope for list responses.
    """

    tasks: List[TaskOut] = Field(..., description="All stored tasks")
    count: int = Field(..., description="Number of tasks returned")
