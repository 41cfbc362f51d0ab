from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from smart_todo.models import TaskSuggestion

_LABELS = {"low": "Low", "medium": "Medium", "high": "High"}


class SuggestionPayload(BaseModel):
    """Shape the oracle must reply with for a task suggestion."""

    priority_score: int = Field(..., ge=1, le=5)
    priority_label: str
    suggested_deadline: Optional[str] = None
    enhanced_description: str = Field(..., min_length=1)
    suggested_category: str = Field(..., min_length=1)
    reasoning: str

    @field_validator("priority_label")
    @classmethod
    def known_label(cls, v: str) -> str:
        label = _LABELS.get(v.strip().lower())
        if label is None:
            raise ValueError(f"unknown priority label: {v!r}")
        return label

    @field_validator("enhanced_description", "suggested_category")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("must not be blank")
        return v2

    @field_validator("suggested_deadline", mode="before")
    @classmethod
    def blank_deadline_is_none(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, str) and (not v.strip() or v.strip().lower() in {"null", "none", "n/a"}):
            return None
        return v

    def to_suggestion(self) -> TaskSuggestion:
        return TaskSuggestion(**self.model_dump())


@dataclass(frozen=True)
class ParsedSuggestion:
    """Either a validated suggestion or the reason parsing failed."""

    suggestion: Optional[TaskSuggestion] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.suggestion is not None


def parse_suggestion(data: Any) -> ParsedSuggestion:
    if not isinstance(data, dict):
        return ParsedSuggestion(error="suggestion payload is not an object")
    try:
        payload = SuggestionPayload.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        return ParsedSuggestion(error=f"invalid suggestion payload ({field}): {first['msg']}")
    return ParsedSuggestion(suggestion=payload.to_suggestion())
