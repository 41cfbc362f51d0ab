import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.dependencies import get_now, get_store
from filtering.task_filter import TaskFilters, filter_tasks, search_tasks
from smart_todo.errors import TaskManagerError, UnexpectedError
from smart_todo.models import PriorityLevel, TaskStatus, TaskSuggestion
from storage.entity_store import EntityStore
from suggestions.suggestion_engine import apply_suggestion

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateTaskIn(BaseModel):
    title: str = ""
    description: str = ""
    category: Optional[str] = None
    deadline: Optional[datetime] = None


class UpdateTaskIn(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    priority_score: Optional[int] = Field(None, ge=1, le=5)
    deadline: Optional[datetime] = None
    status: Optional[TaskStatus] = None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    return value if value else None


@router.get("/tasks")
async def get_tasks(
    status: Optional[TaskStatus] = None,
    category: Optional[str] = None,
    priority: Optional[PriorityLevel] = None,
    q: Optional[str] = None,
    store: EntityStore = Depends(get_store),
) -> dict:
    """List tasks, newest first, optionally filtered and text-searched."""
    filters = TaskFilters(status=status, category=_blank_to_none(category), priority=priority)
    tasks = filter_tasks(store.list_tasks(), filters)
    if q:
        tasks = search_tasks(tasks, q)
    return {"tasks": [t.model_dump(mode="json") for t in tasks]}


@router.get("/tasks/{task_id}")
async def get_task(task_id: str, store: EntityStore = Depends(get_store)) -> dict:
    task = store.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"task": task.model_dump(mode="json")}


@router.post("/tasks", status_code=201)
async def create_task(payload: CreateTaskIn, store: EntityStore = Depends(get_store)) -> dict:
    """Create a task with default priority 3 and status pending."""
    if not payload.title.strip() or not payload.description.strip():
        raise HTTPException(status_code=400, detail="Title and description are required")

    try:
        task = store.create_task(
            title=payload.title,
            description=payload.description,
            category=payload.category,
            deadline=payload.deadline,
        )
    except TaskManagerError:
        raise
    except Exception as e:
        logger.error(f"Error creating task: {e}")
        raise UnexpectedError("Failed to create task") from e

    return {"task": task.model_dump(mode="json")}


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: str, payload: UpdateTaskIn, store: EntityStore = Depends(get_store)
) -> dict:
    """Partial update: only fields present in the body are replaced."""
    updates = payload.model_dump(exclude_unset=True)
    try:
        task = store.update_task(task_id, updates)
    except TaskManagerError:
        raise
    except Exception as e:
        logger.error(f"Error updating task: {e}")
        raise UnexpectedError("Failed to update task") from e

    return {"task": task.model_dump(mode="json")}


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, store: EntityStore = Depends(get_store)) -> dict:
    if not store.delete_task(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"message": "Task deleted successfully"}


@router.post("/tasks/{task_id}/apply-suggestion")
async def apply_task_suggestion(
    task_id: str,
    suggestion: TaskSuggestion,
    store: EntityStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> dict:
    """Overwrite priority, category, description and deadline with a suggestion."""
    task = apply_suggestion(store, task_id, suggestion, now=now)
    return {"task": task.model_dump(mode="json")}
