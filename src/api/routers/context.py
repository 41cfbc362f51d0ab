import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_store, get_suggestion_engine
from smart_todo.config import CONTEXT_LIST_LIMIT
from smart_todo.errors import TaskManagerError, UnexpectedError
from storage.entity_store import EntityStore
from suggestions.suggestion_engine import SuggestionEngine

router = APIRouter()
logger = logging.getLogger(__name__)


class AddContextIn(BaseModel):
    content: str = ""
    source_type: Optional[str] = None


@router.get("/context")
async def get_context_entries(
    limit: int = CONTEXT_LIST_LIMIT, store: EntityStore = Depends(get_store)
) -> dict:
    """Most recent context entries first."""
    entries = store.recent_context_entries(limit)
    return {"context_entries": [e.model_dump(mode="json") for e in entries]}


@router.post("/context", status_code=201)
async def create_context_entry(
    payload: AddContextIn,
    store: EntityStore = Depends(get_store),
    engine: SuggestionEngine = Depends(get_suggestion_engine),
) -> dict:
    """Analyze the entry with the oracle, then store it with its insights."""
    if not payload.content.strip() or not payload.source_type:
        raise HTTPException(status_code=400, detail="Content and source_type are required")

    # never raises on oracle failure, it returns a placeholder instead
    insights = await asyncio.to_thread(engine.analyze_context, payload.content)

    try:
        entry = store.create_context_entry(
            content=payload.content,
            source_type=payload.source_type,
            processed_insights=insights,
        )
    except TaskManagerError:
        raise
    except Exception as e:
        logger.error(f"Error creating context entry: {e}")
        raise UnexpectedError("Failed to create context entry") from e

    return {"context_entry": entry.model_dump(mode="json")}


@router.delete("/context/{entry_id}")
async def delete_context_entry(entry_id: str, store: EntityStore = Depends(get_store)) -> dict:
    if not store.delete_context_entry(entry_id):
        raise HTTPException(status_code=404, detail="Context entry not found")
    return {"message": "Context entry deleted successfully"}
