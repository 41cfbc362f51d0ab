from __future__ import annotations
import json
import re
from typing import Optional

from llm.providers.base import LLMProvider

_URGENT_WORDS = ("urgent", "asap", "today", "deadline", "immediately", "client")


class MockProvider(LLMProvider):
    """Offline provider for local runs and demos: canned JSON keyed on the prompt."""

    def generate(
        self,
        *,
        system: str,
        user: str,
        model: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
    ) -> str:
        lower_user = user.lower()

        if "analyze the task" in lower_user:
            title = _quoted_after("Title:", user) or "Task"
            description = _quoted_after("Description:", user) or title
            subject = f"{title} {description}".lower()

            category = "Work"
            if "mom" in subject or "dinner" in subject or "birthday" in subject:
                category = "Personal"
            elif "dentist" in subject or "gym" in subject or "run " in subject:
                category = "Health"
            elif "read" in subject or "study" in subject or "course" in subject:
                category = "Learning"
            elif "invoice" in subject or "tax" in subject or "budget" in subject:
                category = "Finance"

            urgent = any(w in subject for w in _URGENT_WORDS)
            return json.dumps({
                "priority_score": 4 if urgent else 3,
                "priority_label": "High" if urgent else "Medium",
                "suggested_deadline": "tomorrow" if urgent else None,
                "enhanced_description": description,
                "suggested_category": category,
                "reasoning": "Keyword heuristics from the offline mock provider.",
            })

        if "extract key insights" in lower_user:
            content = (_quoted_after("planning:", user) or "").lower()
            urgent = any(w in content for w in _URGENT_WORDS)
            tone = "Time-sensitive items were mentioned." if urgent else "No urgent items stand out."
            return f"Context reviewed offline. {tone}"

        # Default fallback
        return "{}"


def _quoted_after(marker: str, text: str) -> Optional[str]:
    m = re.search(re.escape(marker) + r'\s*"(.*?)"', text, re.DOTALL)
    return m.group(1) if m else None
