import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.dependencies import get_app_state
from api.metrics import NOTIFICATIONS_PENDING, TASKS_TOTAL
from api.state import AppState
from notifications.deadline_classifier import is_notification_worthy
from smart_todo.config import LLM_PROVIDER

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/ping")
async def ping() -> dict:
    return {"message": "Smart Todo API is running!"}


@router.get("/health")
async def health_check(state: AppState = Depends(get_app_state)) -> dict:
    """Health check endpoint for container orchestration."""
    return {
        "status": "healthy",
        "llm_provider": LLM_PROVIDER,
        **state.store.counts(),
    }


@router.get("/metrics")
async def metrics(state: AppState = Depends(get_app_state)) -> Response:
    """
    Prometheus scrape endpoint.
    """
    try:
        tasks = state.store.list_tasks()
        now = state.clock()
        TASKS_TOTAL.set(len(tasks))
        NOTIFICATIONS_PENDING.set(sum(1 for t in tasks if is_notification_worthy(t, now)))
    except Exception:
        logger.warning("Failed to refresh store gauges", exc_info=True)

    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
