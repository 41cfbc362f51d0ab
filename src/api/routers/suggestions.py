import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_store, get_suggestion_engine
from smart_todo.config import SUGGESTION_CONTEXT_SIZE
from storage.entity_store import EntityStore
from suggestions.suggestion_engine import SuggestionEngine

router = APIRouter()
logger = logging.getLogger(__name__)


class SuggestionRequestIn(BaseModel):
    title: str = ""
    description: str = ""


@router.post("/ai-suggestions")
async def get_ai_suggestions(
    payload: SuggestionRequestIn,
    store: EntityStore = Depends(get_store),
    engine: SuggestionEngine = Depends(get_suggestion_engine),
) -> dict:
    """Context-aware suggestions for a task draft. Oracle trouble yields defaults, not errors."""
    if not payload.title.strip() or not payload.description.strip():
        raise HTTPException(status_code=400, detail="Title and description are required")

    recent_context = store.recent_context_entries(SUGGESTION_CONTEXT_SIZE)
    suggestion = await asyncio.to_thread(
        engine.generate_task_suggestion,
        payload.title,
        payload.description,
        recent_context,
    )
    return {"suggestions": suggestion.model_dump(mode="json")}
