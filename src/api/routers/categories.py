import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_store
from storage.entity_store import EntityStore

router = APIRouter()
logger = logging.getLogger(__name__)


class CreateCategoryIn(BaseModel):
    name: str = ""
    color: Optional[str] = None


@router.get("/categories")
async def get_categories(store: EntityStore = Depends(get_store)) -> dict:
    """Categories ordered by usage count, most used first."""
    return {"categories": [c.model_dump(mode="json") for c in store.list_categories()]}


@router.post("/categories", status_code=201)
async def create_category(payload: CreateCategoryIn, store: EntityStore = Depends(get_store)) -> dict:
    if not payload.name.strip():
        raise HTTPException(status_code=400, detail="Category name is required")

    category = store.create_category(payload.name, payload.color)
    return {"category": category.model_dump(mode="json")}


@router.post("/categories/{category_id}/reset-usage")
async def reset_category_usage(category_id: str, store: EntityStore = Depends(get_store)) -> dict:
    category = store.reset_category_usage(category_id)
    return {"category": category.model_dump(mode="json")}
