from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from smart_todo.models import PRIORITY_RANGES, Category, Task, TaskStatus


class CategoryStats(BaseModel):
    category_id: str
    name: str
    color: Optional[str] = None
    usage_count: int
    task_count: int
    completed_count: int


class TaskStats(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    completion_rate: float = 0.0
    performance: str = "Needs Focus"
    priority_distribution: Dict[str, int] = Field(default_factory=dict)
    categories: List[CategoryStats] = Field(default_factory=list)
    created_this_week: int = 0
    # weekday name (Sun..Sat) -> tasks created that day of the current week
    weekly_activity: Dict[str, int] = Field(default_factory=dict)


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def performance_label(completion_rate: float) -> str:
    if completion_rate > 75:
        return "Excellent"
    if completion_rate > 50:
        return "Good"
    return "Needs Focus"


def compute_task_stats(tasks: Iterable[Task], categories: Iterable[Category], now: datetime) -> TaskStats:
    tasks = list(tasks)
    total = len(tasks)

    by_status = {status: 0 for status in TaskStatus}
    for t in tasks:
        by_status[t.status] += 1

    completed = by_status[TaskStatus.COMPLETED]
    completion_rate = (completed / total) * 100 if total else 0.0

    priority_distribution = {
        level: sum(1 for t in tasks if t.priority_score in scores)
        for level, scores in PRIORITY_RANGES.items()
    }

    category_stats = [
        CategoryStats(
            category_id=c.id,
            name=c.name,
            color=c.color,
            usage_count=c.usage_count,
            task_count=sum(1 for t in tasks if t.category == c.name),
            completed_count=sum(
                1 for t in tasks if t.category == c.name and t.status == TaskStatus.COMPLETED
            ),
        )
        for c in categories
    ]

    start = week_start(now.date())
    week_days = [start + timedelta(days=i) for i in range(7)]
    weekly_activity = {
        f"{d:%a}": sum(1 for t in tasks if t.created_at.date() == d) for d in week_days
    }

    return TaskStats(
        total=total,
        pending=by_status[TaskStatus.PENDING],
        in_progress=by_status[TaskStatus.IN_PROGRESS],
        completed=completed,
        completion_rate=round(completion_rate, 1),
        performance=performance_label(completion_rate),
        priority_distribution=priority_distribution,
        categories=category_stats,
        created_this_week=sum(weekly_activity.values()),
        weekly_activity=weekly_activity,
    )
