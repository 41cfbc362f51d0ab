"""Context-aware task suggestions and context analysis backed by the oracle."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, List, Optional

from api.metrics import ORACLE_CALLS_TOTAL
from llm.llm_client import LLMClient
from llm.schemas import ParsedSuggestion, parse_suggestion
from smart_todo.config import DEFAULT_CATEGORY, SUGGESTION_CONTEXT_SIZE
from smart_todo.errors import OracleError, ValidationError
from smart_todo.models import ContextEntry, Task, TaskSuggestion
from storage.entity_store import EntityStore

logger = logging.getLogger(__name__)

FALLBACK_REASONING = "AI suggestion temporarily unavailable, using defaults"
INSIGHTS_UNAVAILABLE = "Context analysis temporarily unavailable"

SUGGESTION_SYSTEM_PROMPT = (
    "You are an AI assistant that helps with intelligent task management. "
    "Always respond with valid JSON only, no prose."
)
CONTEXT_SYSTEM_PROMPT = "You are an AI assistant that analyzes context for better task management."

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_IN_N_DAYS = re.compile(r"^in\s+(\d+)\s+days?$")


def fallback_suggestion(description: str) -> TaskSuggestion:
    return TaskSuggestion(
        priority_score=3,
        priority_label="Medium",
        enhanced_description=description,
        suggested_category=DEFAULT_CATEGORY,
        reasoning=FALLBACK_REASONING,
    )


def most_recent_entries(entries: Iterable[ContextEntry], size: int = SUGGESTION_CONTEXT_SIZE) -> List[ContextEntry]:
    # sorted() is stable, so entries sharing a timestamp keep the caller's order
    return sorted(entries, key=lambda e: e.created_at, reverse=True)[:size]


def render_context(entries: Iterable[ContextEntry]) -> str:
    return "\n".join(f"[{e.source_type.value}]: {e.content}" for e in entries)


def resolve_suggested_deadline(text: Optional[str], now: datetime) -> Optional[datetime]:
    """Turn a suggested deadline into a datetime, or None when it can't be read.

    Accepts ISO datetimes and dates, plus "today", "tomorrow", "next week"
    and "in N days". Date-only answers resolve to the end of that day.
    """
    if not text or not text.strip():
        return None
    phrase = text.strip().lower().rstrip(".")

    def end_of(day: date) -> datetime:
        return datetime.combine(day, time(23, 59), tzinfo=now.tzinfo)

    offset = None
    if phrase == "today":
        offset = 0
    elif phrase == "tomorrow":
        offset = 1
    elif phrase == "next week":
        offset = 7
    else:
        m = _IN_N_DAYS.match(phrase)
        if m:
            offset = m.group(1)
    if offset is not None:
        try:
            return end_of(now.date() + timedelta(days=int(offset)))
        except (OverflowError, ValueError):
            logger.warning(f"Suggested deadline out of range: {text!r}")
            return None

    if _ISO_DATE.match(phrase):
        try:
            return end_of(date.fromisoformat(phrase))
        except ValueError:
            pass
    try:
        return datetime.fromisoformat(text.strip())
    except ValueError:
        logger.warning(f"Could not resolve suggested deadline {text!r}")
        return None


class SuggestionEngine:
    """Builds oracle requests from a task and recent context, and never fails on oracle errors."""

    def __init__(self, llm_client: Optional[LLMClient] = None, clock: Callable[[], datetime] = datetime.now):
        self.llm = llm_client or LLMClient()
        self._clock = clock

    def _build_suggestion_prompt(self, title: str, description: str, context_entries: List[ContextEntry]) -> str:
        context = render_context(context_entries) or "(no recent context)"
        return f"""I have the following task:
Title: "{title}"
Description: "{description}"

Here is my recent context:
{context}

Based on this information, please analyze the task and provide suggestions. Respond ONLY with a JSON object with exactly these fields:
{{
  "priority_score": integer 1-5 (5 is the most urgent),
  "priority_label": "Low" | "Medium" | "High",
  "suggested_deadline": "ISO date (YYYY-MM-DD), a phrase like 'tomorrow', or null",
  "enhanced_description": "improved description with context-aware details",
  "suggested_category": "suggested category/tag for this task",
  "reasoning": "brief explanation of your suggestions"
}}

Consider factors like:
- Urgency based on keywords and context
- Complexity and time requirements
- Dependencies on other work mentioned in context
- Standard business priorities
Today is {self._clock():%Y-%m-%d}."""

    def _request_suggestion(self, prompt: str) -> ParsedSuggestion:
        try:
            data = self.llm.complete_json(
                system=SUGGESTION_SYSTEM_PROMPT,
                user=prompt,
                model_tier="large",
                temperature=0.7,
                max_tokens=500,
            )
        except OracleError as e:
            return ParsedSuggestion(error=str(e))
        except Exception as e:
            logger.exception("Unexpected failure while requesting a suggestion")
            return ParsedSuggestion(error=f"unexpected oracle failure: {e}")
        return parse_suggestion(data)

    def generate_task_suggestion(
        self,
        title: str,
        description: str,
        context_entries: Iterable[ContextEntry] = (),
    ) -> TaskSuggestion:
        """
        Ask the oracle for priority, category, deadline and a richer description.

        Only the 5 most recently created context entries are sent. Any oracle
        failure (unavailable, timeout, unparseable or invalid reply) yields
        the fixed fallback suggestion instead of an error.

        Raises:
            ValidationError: title or description is blank.
        """
        if not title or not title.strip() or not description or not description.strip():
            raise ValidationError("Title and description are required")

        recent = most_recent_entries(context_entries)
        prompt = self._build_suggestion_prompt(title, description, recent)
        parsed = self._request_suggestion(prompt)

        if not parsed.ok:
            logger.warning(f"Task suggestion fell back to defaults: {parsed.error}")
            ORACLE_CALLS_TOTAL.labels(operation="suggestion", outcome="fallback").inc()
            return fallback_suggestion(description)

        ORACLE_CALLS_TOTAL.labels(operation="suggestion", outcome="ok").inc()
        logger.info(
            f"Suggestion ready: priority={parsed.suggestion.priority_score}, "
            f"category={parsed.suggestion.suggested_category}"
        )
        return parsed.suggestion

    def analyze_context(self, content: str) -> str:
        """Summarize themes, urgency and deadlines of a context entry in 2-3 sentences."""
        prompt = f"""Analyze the following context and extract key insights that could help with task prioritization and planning:

"{content}"

Provide a brief summary of:
- Key themes or topics
- Urgency indicators
- People or projects mentioned
- Deadlines or time-sensitive items

Keep the response concise (2-3 sentences)."""

        try:
            text = self.llm.complete(
                system=CONTEXT_SYSTEM_PROMPT,
                user=prompt,
                model_tier="small",
                temperature=0.5,
                max_tokens=200,
            )
        except OracleError as e:
            logger.warning(f"Context analysis unavailable: {e}")
            ORACLE_CALLS_TOTAL.labels(operation="context_analysis", outcome="fallback").inc()
            return INSIGHTS_UNAVAILABLE

        ORACLE_CALLS_TOTAL.labels(operation="context_analysis", outcome="ok").inc()
        return text.strip()


def apply_suggestion(
    store: EntityStore,
    task_id: str,
    suggestion: TaskSuggestion,
    now: Optional[datetime] = None,
) -> Task:
    """Overwrite priority, category, description and (when readable) deadline of a task.

    Title, status and identity are left alone; the store refreshes updated_at.
    """
    updates = {
        "priority_score": suggestion.priority_score,
        "category": suggestion.suggested_category,
        "description": suggestion.enhanced_description,
    }
    if suggestion.suggested_deadline:
        deadline = resolve_suggested_deadline(suggestion.suggested_deadline, now or datetime.now())
        if deadline is not None:
            updates["deadline"] = deadline

    return store.update_task(task_id, updates)
