from datetime import datetime, timedelta

import pytest

from smart_todo.models import ContextEntry, Task, TaskSuggestion

NOW = datetime(2024, 1, 10, 12, 0)


def test_task_priority_out_of_range():
    with pytest.raises(Exception):
        Task(id="t", title="Bad", description="d", priority_score=6, created_at=NOW, updated_at=NOW)
    with pytest.raises(Exception):
        Task(id="t", title="Bad", description="d", priority_score=0, created_at=NOW, updated_at=NOW)


def test_task_empty_title():
    with pytest.raises(Exception):
        Task(id="t", title="", description="d", created_at=NOW, updated_at=NOW)


def test_task_blank_description():
    with pytest.raises(Exception):
        Task(id="t", title="T", description="   ", created_at=NOW, updated_at=NOW)


def test_task_updated_before_created():
    with pytest.raises(Exception):
        Task(id="t", title="T", description="d", created_at=NOW, updated_at=NOW - timedelta(seconds=1))


def test_task_unknown_status():
    with pytest.raises(Exception):
        Task(id="t", title="T", description="d", status="archived", created_at=NOW, updated_at=NOW)


def test_context_unknown_source_type():
    with pytest.raises(Exception):
        ContextEntry(id="e", content="x", source_type="fax", created_at=NOW)


def test_suggestion_bad_label():
    with pytest.raises(Exception):
        TaskSuggestion(
            priority_score=3,
            priority_label="Urgent",
            enhanced_description="d",
            suggested_category="Work",
            reasoning="r",
        )
