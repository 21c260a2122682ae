from __future__ import annotations

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..models import LookupStatus, TaskLookup
from ..repositories import Repository
from ..schemas import TaskCreate, TaskList, TaskOut, TaskUpdate
from ..utils import parse_task_id, tasks_envelope

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)

_ERROR_RESPONSE = {
    "content": {"application/json": {"example": {"error": "Failed to fetch task"}}},
}


def get_task_repository(request: Request) -> Repository:
    """
    Dependency returning the repository the application was built with.
    """
    return request.app.state.repository


def _require_task_id(task_id: str) -> ObjectId:
    oid = parse_task_id(task_id)
    if oid is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid task ID")
    return oid


def _unwrap(lookup: TaskLookup) -> TaskOut:
    if lookup.status is LookupStatus.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    if lookup.status is LookupStatus.FAILED or lookup.task is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=lookup.error or "Failed to fetch task",
        )
    return TaskOut.from_entity(lookup.task)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=TaskList,
    response_model_exclude_none=True,
    summary="List Tasks",
    description="Return every stored task together with the number of tasks returned.",
    responses={
        200: {"description": "Tasks retrieved successfully"},
        500: {"description": "Store failure", **_ERROR_RESPONSE},
    },
)
def list_tasks(repo: Repository = Depends(get_task_repository)) -> TaskList:
    """
    List all tasks.
    """
    items = repo.list()
    envelope = tasks_envelope(TaskOut.from_entity(it) for it in items)
    return TaskList(**envelope)


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=TaskOut,
    response_model_exclude_none=True,
    summary="Get Task",
    description="Get a single task by ID.",
    responses={
        200: {"description": "Task found"},
        400: {"description": "Malformed task ID", **_ERROR_RESPONSE},
        404: {"description": "Task not found", **_ERROR_RESPONSE},
        500: {"description": "Store failure", **_ERROR_RESPONSE},
    },
)
def get_task(task_id: str, repo: Repository = Depends(get_task_repository)) -> TaskOut:
    """
    Retrieve a single task by its ID.
    """
    return _unwrap(repo.get(_require_task_id(task_id)))


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task and return the created resource.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"description": "Malformed body or missing title", **_ERROR_RESPONSE},
        500: {"description": "Store failure", **_ERROR_RESPONSE},
    },
)
def create_task(payload: TaskCreate, repo: Repository = Depends(get_task_repository)) -> TaskOut:
    """
    Create a new task. The store id and both timestamps are generated here.
    """
    if not payload.title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")
    created = repo.create(payload)
    return TaskOut.from_entity(created)


_UPDATE_ROUTE = dict(
    response_model=TaskOut,
    response_model_exclude_none=True,
    summary="Update Task",
    description=(
        "Partially update a task. Empty title/description values are ignored; "
        "completed is applied whenever it is present. updated_at is always refreshed."
    ),
    responses={
        200: {"description": "Task updated"},
        400: {"description": "Malformed task ID or body", **_ERROR_RESPONSE},
        404: {"description": "Task not found", **_ERROR_RESPONSE},
        500: {"description": "Store failure", **_ERROR_RESPONSE},
    },
)


# PUBLIC_INTERFACE
@router.patch("/{task_id}", **_UPDATE_ROUTE)
@router.put("/{task_id}", **_UPDATE_ROUTE)
def update_task(
    payload: TaskUpdate,
    oid: ObjectId = Depends(_require_task_id),
    repo: Repository = Depends(get_task_repository),
) -> TaskOut:
    """
    Partial update of a task, returning the stored record after the update.
    PUT is accepted with the same partial semantics as PATCH.
    """
    return _unwrap(repo.update(oid, payload.changes()))
