from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from smart_todo.config import (
    DEFAULT_CATEGORY,
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_PRIORITY_SCORE,
)


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class SourceType(str, Enum):
    EMAIL = "email"
    MESSAGE = "message"
    NOTE = "note"
    MEETING = "meeting"
    OTHER = "other"


PriorityLevel = Literal["low", "medium", "high"]
PriorityLabel = Literal["Low", "Medium", "High"]

# priority bucket -> accepted priority_score values
PRIORITY_RANGES: Dict[str, FrozenSet[int]] = {
    "low": frozenset({1, 2}),
    "medium": frozenset({3}),
    "high": frozenset({4, 5}),
}


def _not_blank(v: str, field_name: str) -> str:
    v2 = v.strip()
    if not v2:
        raise ValueError(f"{field_name} must not be blank")
    return v2


class Task(BaseModel):
    id: str
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: str = DEFAULT_CATEGORY

    priority_score: int = Field(DEFAULT_PRIORITY_SCORE, ge=1, le=5)

    deadline: Optional[datetime] = None
    status: TaskStatus = TaskStatus.PENDING

    created_at: datetime
    updated_at: datetime

    @field_validator("title", "description")
    @classmethod
    def text_not_blank(cls, v: str, info: ValidationInfo) -> str:
        return _not_blank(v, info.field_name)

    @model_validator(mode="after")
    def updated_after_created(self) -> "Task":
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not precede created_at")
        return self


class ContextEntry(BaseModel):
    """A free-text record of daily activity, used as background for suggestions."""

    id: str
    content: str = Field(..., min_length=1)
    source_type: SourceType
    processed_insights: Optional[str] = None
    created_at: datetime

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        return _not_blank(v, "content")


class Category(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    # lifetime popularity: bumped on task creation, never lowered by deletes
    usage_count: int = Field(0, ge=0)
    color: Optional[str] = DEFAULT_CATEGORY_COLOR


class TaskSuggestion(BaseModel):
    """Metadata proposed by the oracle for a task; callers may apply it."""

    priority_score: int = Field(..., ge=1, le=5)
    priority_label: PriorityLabel
    suggested_deadline: Optional[str] = None
    enhanced_description: str
    suggested_category: str
    reasoning: str
