from __future__ import annotations

from typing import Iterable, List, Optional

from pydantic import BaseModel

from smart_todo.models import PRIORITY_RANGES, PriorityLevel, Task, TaskStatus


class TaskFilters(BaseModel):
    """Structural task criteria. Unset fields do not constrain the result."""

    status: Optional[TaskStatus] = None
    category: Optional[str] = None
    priority: Optional[PriorityLevel] = None

    def is_empty(self) -> bool:
        return self.status is None and self.category is None and self.priority is None

    def matches(self, task: Task) -> bool:
        if self.status is not None and task.status != self.status:
            return False
        if self.category is not None and task.category != self.category:
            return False
        if self.priority is not None and task.priority_score not in PRIORITY_RANGES[self.priority]:
            return False
        return True


def filter_tasks(tasks: Iterable[Task], filters: Optional[TaskFilters] = None) -> List[Task]:
    """Keep the tasks matching every supplied criterion, in their given order.

    Pass ``store.list_tasks()`` to get results in listing order.
    """
    if filters is None or filters.is_empty():
        return list(tasks)
    return [t for t in tasks if filters.matches(t)]


def matches_search(task: Task, query: Optional[str]) -> bool:
    """Case-insensitive substring match on title or description."""
    if not query or not query.strip():
        return True
    needle = query.strip().lower()
    return needle in task.title.lower() or needle in task.description.lower()


def search_tasks(tasks: Iterable[Task], query: Optional[str]) -> List[Task]:
    return [t for t in tasks if matches_search(t, query)]
