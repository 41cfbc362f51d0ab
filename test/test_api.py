import json

import httpx
import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.state import build_state
from llm.llm_client import LLMClient
from suggestions.suggestion_engine import FALLBACK_REASONING, INSIGHTS_UNAVAILABLE

from conftest import FailingProvider, FakeClock, FakeProvider

SUGGESTION_REPLY = json.dumps({
    "priority_score": 4,
    "priority_label": "High",
    "suggested_deadline": "tomorrow",
    "enhanced_description": "Prepare the Q1 report with the numbers from finance",
    "suggested_category": "Work",
    "reasoning": "Finance asked for it before Friday.",
})


def _client(provider=None, seed_categories=False) -> TestClient:
    state = build_state(
        llm_client=LLMClient(provider=provider or FakeProvider(SUGGESTION_REPLY)),
        seed_categories=seed_categories,
        clock=FakeClock(),
    )
    return TestClient(create_app(state))


@pytest.fixture
def client():
    return _client()


def _create(client, **fields):
    body = {"title": "Write report", "description": "Quarterly numbers", **fields}
    r = client.post("/tasks", json=body)
    assert r.status_code == 201, r.text
    return r.json()["task"]


def test_create_task_defaults(client):
    task = _create(client)
    assert task["priority_score"] == 3
    assert task["status"] == "pending"
    assert task["category"] == "General"
    assert task["deadline"] is None


@pytest.mark.parametrize(
    "body",
    [
        {"title": "", "description": "d"},
        {"title": "t", "description": "   "},
        {"title": "t"},
        {},
    ],
)
def test_create_task_requires_title_and_description(client, body):
    r = client.post("/tasks", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "Title and description are required"}
    assert client.get("/tasks").json()["tasks"] == []


def test_get_update_delete_task(client):
    task = _create(client)

    r = client.get(f"/tasks/{task['id']}")
    assert r.status_code == 200
    assert r.json()["task"]["title"] == "Write report"

    r = client.put(f"/tasks/{task['id']}", json={"status": "completed", "priority_score": 5})
    assert r.status_code == 200
    updated = r.json()["task"]
    assert updated["status"] == "completed"
    assert updated["priority_score"] == 5
    assert updated["description"] == "Quarterly numbers"
    assert updated["created_at"] == task["created_at"]
    assert updated["updated_at"] > task["updated_at"]

    r = client.delete(f"/tasks/{task['id']}")
    assert r.status_code == 200
    assert r.json() == {"message": "Task deleted successfully"}

    assert client.get(f"/tasks/{task['id']}").status_code == 404
    assert client.delete(f"/tasks/{task['id']}").status_code == 404


def test_missing_task_errors_have_error_body(client):
    r = client.get("/tasks/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Task not found"}

    r = client.put("/tasks/nope", json={"title": "x"})
    assert r.status_code == 404
    assert "error" in r.json()


def test_update_rejects_out_of_range_priority(client):
    task = _create(client)
    r = client.put(f"/tasks/{task['id']}", json={"priority_score": 9})
    assert r.status_code == 400
    assert "error" in r.json()
    assert client.get(f"/tasks/{task['id']}").json()["task"]["priority_score"] == 3


def test_update_rejects_blank_title(client):
    task = _create(client)
    r = client.put(f"/tasks/{task['id']}", json={"title": "  "})
    assert r.status_code == 400


def test_list_filters_and_search(client):
    low = _create(client, title="Water plants")
    client.put(f"/tasks/{low['id']}", json={"priority_score": 1, "category": "Home"})
    high = _create(client, title="Ship release", category="Work")
    client.put(f"/tasks/{high['id']}", json={"priority_score": 5})
    _create(client, title="Review report", category="Work")

    titles = [t["title"] for t in client.get("/tasks").json()["tasks"]]
    assert titles == ["Review report", "Ship release", "Water plants"]

    r = client.get("/tasks", params={"priority": "high"})
    assert [t["title"] for t in r.json()["tasks"]] == ["Ship release"]

    r = client.get("/tasks", params={"category": "Work", "priority": "medium"})
    assert [t["title"] for t in r.json()["tasks"]] == ["Review report"]

    r = client.get("/tasks", params={"q": "PLANTS"})
    assert [t["title"] for t in r.json()["tasks"]] == ["Water plants"]

    r = client.get("/tasks", params={"status": "completed"})
    assert r.json()["tasks"] == []


def test_list_rejects_unknown_priority(client):
    r = client.get("/tasks", params={"priority": "urgent"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_categories_seeded_and_usage_counted():
    client = _client(seed_categories=True)
    names = {c["name"] for c in client.get("/categories").json()["categories"]}
    assert {"Work", "Personal", "Health", "Learning", "Finance"} <= names

    _create(client, category="Health")
    _create(client, category="Health")
    _create(client, category="Unknown")

    top = client.get("/categories").json()["categories"][0]
    assert top["name"] == "Health"
    assert top["usage_count"] == 2

    r = client.post(f"/categories/{top['id']}/reset-usage")
    assert r.status_code == 200
    assert r.json()["category"]["usage_count"] == 0


def test_create_category(client):
    r = client.post("/categories", json={"name": "Errands"})
    assert r.status_code == 201
    assert r.json()["category"]["color"] == "#6B7280"
    assert r.json()["category"]["usage_count"] == 0

    r = client.post("/categories", json={"name": " "})
    assert r.status_code == 400

    r = client.post("/categories/missing/reset-usage")
    assert r.status_code == 404


def test_context_entry_stores_insights():
    provider = FakeProvider("Client wants mobile features before the holidays.")
    client = _client(provider=provider)

    r = client.post("/context", json={"content": "Email from client", "source_type": "email"})
    assert r.status_code == 201
    entry = r.json()["context_entry"]
    assert entry["processed_insights"] == "Client wants mobile features before the holidays."
    assert entry["source_type"] == "email"

    listed = client.get("/context").json()["context_entries"]
    assert [e["id"] for e in listed] == [entry["id"]]

    assert client.delete(f"/context/{entry['id']}").status_code == 200
    assert client.delete(f"/context/{entry['id']}").status_code == 404


def test_context_entry_survives_oracle_failure():
    client = _client(provider=FailingProvider(httpx.ConnectError("down")))
    r = client.post("/context", json={"content": "Standup notes", "source_type": "meeting"})
    assert r.status_code == 201
    assert r.json()["context_entry"]["processed_insights"] == INSIGHTS_UNAVAILABLE


@pytest.mark.parametrize(
    "body",
    [
        {"content": "", "source_type": "note"},
        {"content": "hello"},
        {"content": "hello", "source_type": "fax"},
    ],
)
def test_context_entry_validation(client, body):
    r = client.post("/context", json=body)
    assert r.status_code == 400
    assert "error" in r.json()


def test_context_listing_limit(client):
    for i in range(4):
        client.post("/context", json={"content": f"note {i}", "source_type": "note"})
    listed = client.get("/context", params={"limit": 2}).json()["context_entries"]
    assert [e["content"] for e in listed] == ["note 3", "note 2"]


def test_ai_suggestions(client):
    r = client.post("/ai-suggestions", json={"title": "Report", "description": "Q1 report"})
    assert r.status_code == 200
    s = r.json()["suggestions"]
    assert s["priority_score"] == 4
    assert s["priority_label"] == "High"
    assert s["suggested_category"] == "Work"
    assert s["suggested_deadline"] == "tomorrow"


def test_ai_suggestions_include_recent_context():
    provider = FakeProvider(SUGGESTION_REPLY)
    client = _client(provider=provider)
    client.post("/context", json={"content": "Finance wants the report Friday", "source_type": "email"})

    client.post("/ai-suggestions", json={"title": "Report", "description": "Q1 report"})
    assert "[email]: Finance wants the report Friday" in provider.calls[-1]["user"]


def test_ai_suggestions_fallback_on_oracle_failure():
    client = _client(provider=FailingProvider(httpx.ReadTimeout("slow")))
    r = client.post("/ai-suggestions", json={"title": "Report", "description": "Q1 report"})
    assert r.status_code == 200
    s = r.json()["suggestions"]
    assert s["priority_score"] == 3
    assert s["priority_label"] == "Medium"
    assert s["enhanced_description"] == "Q1 report"
    assert s["suggested_category"] == "General"
    assert s["reasoning"] == FALLBACK_REASONING


def test_ai_suggestions_require_input(client):
    r = client.post("/ai-suggestions", json={"title": "Report", "description": ""})
    assert r.status_code == 400
    assert r.json() == {"error": "Title and description are required"}


def test_apply_suggestion(client):
    task = _create(client)
    suggestion = client.post(
        "/ai-suggestions", json={"title": task["title"], "description": task["description"]}
    ).json()["suggestions"]

    r = client.post(f"/tasks/{task['id']}/apply-suggestion", json=suggestion)
    assert r.status_code == 200
    applied = r.json()["task"]
    assert applied["priority_score"] == 4
    assert applied["category"] == "Work"
    assert applied["description"] == suggestion["enhanced_description"]
    # clock starts on 2024-01-10
    assert applied["deadline"].startswith("2024-01-11T23:59")
    assert applied["title"] == task["title"]
    assert applied["status"] == "pending"

    r = client.post("/tasks/missing/apply-suggestion", json=suggestion)
    assert r.status_code == 404


def test_notifications(client):
    _create(client, title="Late", deadline="2024-01-09T10:00:00")
    _create(client, title="Tomorrow", deadline="2024-01-11T09:00:00")
    _create(client, title="Next month", deadline="2024-02-15T09:00:00")
    done = _create(client, title="Done late", deadline="2024-01-08T10:00:00")
    client.put(f"/tasks/{done['id']}", json={"status": "completed"})

    r = client.get("/notifications")
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 2
    assert [n["title"] for n in body["notifications"]] == ["Late", "Tomorrow"]
    assert [n["glyph"] for n in body["notifications"]] == ["alert", "calendar-info"]
    assert [n["label"] for n in body["notifications"]] == ["Overdue", "Due tomorrow"]


def test_analytics(client):
    first = _create(client, title="A")
    _create(client, title="B")
    client.put(f"/tasks/{first['id']}", json={"status": "completed", "priority_score": 5})

    stats = client.get("/analytics").json()
    assert stats["total"] == 2
    assert stats["completed"] == 1
    assert stats["pending"] == 1
    assert stats["completion_rate"] == 50.0
    assert stats["performance"] == "Needs Focus"
    assert stats["priority_distribution"] == {"low": 0, "medium": 1, "high": 1}
    # 2024-01-10 is a Wednesday
    assert stats["weekly_activity"]["Wed"] == 2
    assert stats["created_this_week"] == 2


def test_apply_suggestion_with_unreadable_deadline(client):
    task = _create(client, deadline="2024-03-01T09:00:00")
    suggestion = json.loads(SUGGESTION_REPLY)
    suggestion["suggested_deadline"] = "in 99999999 days"

    r = client.post(f"/tasks/{task['id']}/apply-suggestion", json=suggestion)
    assert r.status_code == 200
    assert r.json()["task"]["deadline"] == "2024-03-01T09:00:00"
    assert r.json()["task"]["priority_score"] == 4


def test_unexpected_failure_returns_error_body(monkeypatch):
    state = build_state(
        llm_client=LLMClient(provider=FakeProvider(SUGGESTION_REPLY)),
        seed_categories=False,
        clock=FakeClock(),
    )

    def broken():
        raise RuntimeError("store exploded")

    monkeypatch.setattr(state.store, "list_tasks", broken)
    client = TestClient(create_app(state), raise_server_exceptions=False)

    for path in ("/analytics", "/notifications", "/tasks"):
        r = client.get(path)
        assert r.status_code == 500
        assert r.json() == {"error": "Internal server error"}
