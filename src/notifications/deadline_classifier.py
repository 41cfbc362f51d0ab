"""
Deadline urgency buckets and the notification list built from them.

``classify`` is pure: the same (deadline, now) pair always yields the same
bucket. Rules are checked in order, first match wins:

1. no deadline            -> none
2. deadline < now         -> overdue (any earlier moment, even today)
3. same calendar day      -> due_today
4. next calendar day      -> due_tomorrow
5. anything later         -> future
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel

from smart_todo.config import NOTIFICATION_LIMIT
from smart_todo.models import Task, TaskStatus


class DeadlineBucket(str, Enum):
    NONE = "none"
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    DUE_TOMORROW = "due_tomorrow"
    FUTURE = "future"


class NotificationGlyph(str, Enum):
    ALERT = "alert"
    CALENDAR_WARN = "calendar-warn"
    CALENDAR_INFO = "calendar-info"


URGENT_BUCKETS = frozenset(
    {DeadlineBucket.OVERDUE, DeadlineBucket.DUE_TODAY, DeadlineBucket.DUE_TOMORROW}
)

_LABELS = {
    DeadlineBucket.OVERDUE: "Overdue",
    DeadlineBucket.DUE_TODAY: "Due today",
    DeadlineBucket.DUE_TOMORROW: "Due tomorrow",
}


class Notification(BaseModel):
    task_id: str
    title: str
    deadline: datetime
    bucket: DeadlineBucket
    glyph: NotificationGlyph
    label: str


def _align(deadline: datetime, now: datetime) -> datetime:
    """Make ``deadline`` comparable with ``now`` when only one carries a timezone."""
    if (deadline.tzinfo is None) == (now.tzinfo is None):
        return deadline
    if deadline.tzinfo is None:
        return deadline.replace(tzinfo=now.tzinfo)
    # aware deadline vs naive local clock
    return deadline.astimezone().replace(tzinfo=None)


def classify(deadline: Optional[datetime], now: datetime) -> DeadlineBucket:
    if deadline is None:
        return DeadlineBucket.NONE

    deadline = _align(deadline, now)
    if deadline < now:
        return DeadlineBucket.OVERDUE

    # calendar days are taken in now's timezone
    if deadline.tzinfo is not None:
        deadline = deadline.astimezone(now.tzinfo)
    day = deadline.date()
    today = now.date()
    if day == today:
        return DeadlineBucket.DUE_TODAY
    if day == today + timedelta(days=1):
        return DeadlineBucket.DUE_TOMORROW
    return DeadlineBucket.FUTURE


def notification_glyph(bucket: DeadlineBucket) -> NotificationGlyph:
    if bucket == DeadlineBucket.OVERDUE:
        return NotificationGlyph.ALERT
    if bucket == DeadlineBucket.DUE_TODAY:
        return NotificationGlyph.CALENDAR_WARN
    return NotificationGlyph.CALENDAR_INFO


def notification_label(bucket: DeadlineBucket, deadline: Optional[datetime]) -> str:
    if bucket in _LABELS:
        return _LABELS[bucket]
    if deadline is None:
        return ""
    return f"{deadline:%b} {deadline.day}"


def is_notification_worthy(task: Task, now: datetime) -> bool:
    if task.status == TaskStatus.COMPLETED:
        return False
    return classify(task.deadline, now) in URGENT_BUCKETS


def build_notifications(
    tasks: Iterable[Task], now: datetime, limit: int = NOTIFICATION_LIMIT
) -> List[Notification]:
    """Open tasks that are overdue or due today/tomorrow, earliest deadline first."""
    worthy = [t for t in tasks if is_notification_worthy(t, now)]
    worthy.sort(key=lambda t: _align(t.deadline, now))

    notifications = []
    for task in worthy[: max(limit, 0)]:
        bucket = classify(task.deadline, now)
        notifications.append(
            Notification(
                task_id=task.id,
                title=task.title,
                deadline=task.deadline,
                bucket=bucket,
                glyph=notification_glyph(bucket),
                label=notification_label(bucket, task.deadline),
            )
        )
    return notifications
