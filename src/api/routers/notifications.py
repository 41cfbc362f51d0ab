from datetime import datetime

from fastapi import APIRouter, Depends

from api.dependencies import get_now, get_store
from notifications.deadline_classifier import build_notifications
from smart_todo.config import NOTIFICATION_LIMIT
from storage.entity_store import EntityStore

router = APIRouter()


@router.get("/notifications")
async def get_notifications(
    limit: int = NOTIFICATION_LIMIT,
    store: EntityStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> dict:
    """Open tasks that are overdue or due today/tomorrow, earliest deadline first."""
    items = build_notifications(store.list_tasks(), now, limit=limit)
    return {
        "notifications": [n.model_dump(mode="json") for n in items],
        "count": len(items),
    }
