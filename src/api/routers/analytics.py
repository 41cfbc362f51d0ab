from datetime import datetime

from fastapi import APIRouter, Depends

from analytics.task_stats import compute_task_stats
from api.dependencies import get_now, get_store
from storage.entity_store import EntityStore

router = APIRouter()


@router.get("/analytics")
async def get_analytics(
    store: EntityStore = Depends(get_store),
    now: datetime = Depends(get_now),
) -> dict:
    stats = compute_task_stats(store.list_tasks(), store.list_categories(), now)
    return stats.model_dump(mode="json")
