"""
In-memory entity store for tasks, context entries and categories.

The store is the only owner of the three collections. Every public method
hands out copies, so callers can read snapshots without being able to
change what other callers see. Each collection is guarded by its own lock.
"""

from __future__ import annotations

import itertools
import logging
import threading
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from smart_todo.config import DEFAULT_CATEGORY, DEFAULT_CATEGORY_COLOR, DEFAULT_PRIORITY_SCORE
from smart_todo.errors import NotFoundError, ValidationError
from smart_todo.models import Category, ContextEntry, SourceType, Task, TaskStatus

logger = logging.getLogger(__name__)

# fields a partial update may never touch
_IMMUTABLE_TASK_FIELDS = {"id", "created_at", "updated_at"}


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "invalid value"


def _require_text(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return value


class EntityStore:
    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

        self._tasks: List[Task] = []
        self._context_entries: List[ContextEntry] = []
        self._categories: List[Category] = []

        # insertion sequence, used as a tie-break when two records share a timestamp
        self._seq = itertools.count()
        self._task_seq: Dict[str, int] = {}
        self._context_seq: Dict[str, int] = {}

        self._tasks_lock = threading.Lock()
        self._context_lock = threading.Lock()
        self._categories_lock = threading.Lock()

    # ------------------------------------------------------------------ tasks

    def create_task(
        self,
        title: str,
        description: str,
        category: Optional[str] = None,
        priority_score: Optional[int] = None,
        deadline: Optional[datetime] = None,
        status: TaskStatus | str = TaskStatus.PENDING,
    ) -> Task:
        """Create a task and bump the usage count of the category it names.

        Raises:
            ValidationError: title or description missing/blank, or any field
                out of range.
        """
        _require_text(title, "title")
        _require_text(description, "description")

        now = self._clock()
        try:
            task = Task(
                id=str(uuid.uuid4()),
                title=title,
                description=description,
                category=category or DEFAULT_CATEGORY,
                priority_score=DEFAULT_PRIORITY_SCORE if priority_score is None else priority_score,
                deadline=deadline,
                status=status,
                created_at=now,
                updated_at=now,
            )
        except PydanticValidationError as e:
            raise ValidationError(_describe(e)) from e

        with self._tasks_lock:
            self._tasks.append(task)
            self._task_seq[task.id] = next(self._seq)

            with self._categories_lock:
                # first match wins when duplicate names exist
                for cat in self._categories:
                    if cat.name == task.category:
                        cat.usage_count += 1
                        break

        logger.info(f"Created task {task.id}: {task.title}")
        return task.model_copy()

    def get_task(self, task_id: str) -> Optional[Task]:
        with self._tasks_lock:
            for task in self._tasks:
                if task.id == task_id:
                    return task.model_copy()
        return None

    def list_tasks(self) -> List[Task]:
        """All tasks, most recently created first."""
        with self._tasks_lock:
            ordered = sorted(
                self._tasks,
                key=lambda t: (t.created_at, self._task_seq[t.id]),
                reverse=True,
            )
            return [t.model_copy() for t in ordered]

    def update_task(self, task_id: str, updates: Dict[str, Any]) -> Task:
        """Merge ``updates`` over an existing task and refresh ``updated_at``.

        The merged record is validated as a whole; on failure the stored task
        is left untouched.

        Raises:
            NotFoundError: no task with ``task_id``.
            ValidationError: unknown field or invalid merged value.
        """
        unknown = set(updates) - set(Task.model_fields)
        if unknown:
            raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

        changes = {k: v for k, v in updates.items() if k not in _IMMUTABLE_TASK_FIELDS}

        with self._tasks_lock:
            for i, task in enumerate(self._tasks):
                if task.id != task_id:
                    continue

                merged = task.model_dump()
                merged.update(changes)
                merged["updated_at"] = max(self._clock(), task.created_at)
                try:
                    updated = Task.model_validate(merged)
                except PydanticValidationError as e:
                    raise ValidationError(_describe(e)) from e

                self._tasks[i] = updated
                logger.info(f"Updated task {task_id} fields: {sorted(changes)}")
                return updated.model_copy()

        raise NotFoundError(f"Task not found: {task_id}")

    def delete_task(self, task_id: str) -> bool:
        # category usage counts are not decremented
        with self._tasks_lock:
            before = len(self._tasks)
            self._tasks = [t for t in self._tasks if t.id != task_id]
            deleted = len(self._tasks) < before
            if deleted:
                self._task_seq.pop(task_id, None)

        if deleted:
            logger.info(f"Deleted task {task_id}")
        return deleted

    # -------------------------------------------------------- context entries

    def create_context_entry(
        self,
        content: str,
        source_type: SourceType | str,
        processed_insights: Optional[str] = None,
    ) -> ContextEntry:
        """Append a context entry. ``processed_insights`` is stored verbatim.

        Raises:
            ValidationError: content or source_type missing, or an unknown
                source type.
        """
        _require_text(content, "content")
        if source_type is None or (isinstance(source_type, str) and not source_type.strip()):
            raise ValidationError("source_type is required")

        try:
            entry = ContextEntry(
                id=str(uuid.uuid4()),
                content=content,
                source_type=source_type,
                processed_insights=processed_insights,
                created_at=self._clock(),
            )
        except PydanticValidationError as e:
            raise ValidationError(_describe(e)) from e

        with self._context_lock:
            self._context_entries.append(entry)
            self._context_seq[entry.id] = next(self._seq)

        logger.info(f"Created context entry {entry.id} ({entry.source_type.value})")
        return entry.model_copy()

    def delete_context_entry(self, entry_id: str) -> bool:
        with self._context_lock:
            before = len(self._context_entries)
            self._context_entries = [e for e in self._context_entries if e.id != entry_id]
            deleted = len(self._context_entries) < before
            if deleted:
                self._context_seq.pop(entry_id, None)

        if deleted:
            logger.info(f"Deleted context entry {entry_id}")
        return deleted

    def recent_context_entries(self, limit: int = 10) -> List[ContextEntry]:
        """The ``limit`` most recently created entries, newest first."""
        if limit <= 0:
            return []
        with self._context_lock:
            ordered = sorted(
                self._context_entries,
                key=lambda e: (e.created_at, self._context_seq[e.id]),
                reverse=True,
            )
            return [e.model_copy() for e in ordered[:limit]]

    # ------------------------------------------------------------- categories

    def create_category(self, name: str, color: Optional[str] = None) -> Category:
        """Create a category. Duplicate names are allowed and tracked separately."""
        _require_text(name, "name")
        category = Category(
            id=str(uuid.uuid4()),
            name=name,
            usage_count=0,
            color=color or DEFAULT_CATEGORY_COLOR,
        )
        with self._categories_lock:
            self._categories.append(category)

        logger.info(f"Created category {category.id}: {category.name}")
        return category.model_copy()

    def get_category(self, category_id: str) -> Optional[Category]:
        with self._categories_lock:
            for cat in self._categories:
                if cat.id == category_id:
                    return cat.model_copy()
        return None

    def list_categories(self) -> List[Category]:
        """All categories, most used first (creation order among equals)."""
        with self._categories_lock:
            ordered = sorted(self._categories, key=lambda c: c.usage_count, reverse=True)
            return [c.model_copy() for c in ordered]

    def reset_category_usage(self, category_id: str) -> Category:
        with self._categories_lock:
            for cat in self._categories:
                if cat.id == category_id:
                    cat.usage_count = 0
                    logger.info(f"Reset usage count of category {category_id}")
                    return cat.model_copy()

        raise NotFoundError(f"Category not found: {category_id}")

    # ------------------------------------------------------------------ misc

    def counts(self) -> Dict[str, int]:
        with self._tasks_lock:
            tasks = len(self._tasks)
        with self._context_lock:
            context_entries = len(self._context_entries)
        with self._categories_lock:
            categories = len(self._categories)
        return {"tasks": tasks, "context_entries": context_entries, "categories": categories}
