from __future__ import annotations

from typing import List, Tuple

from smart_todo.models import Category
from storage.entity_store import EntityStore

# name, color
DEFAULT_CATEGORIES: List[Tuple[str, str]] = [
    ("Work", "#3B82F6"),
    ("Personal", "#10B981"),
    ("Health", "#F59E0B"),
    ("Learning", "#8B5CF6"),
    ("Finance", "#EF4444"),
]


def seed_default_categories(store: EntityStore) -> List[Category]:
    """Create the built-in categories a fresh install starts with."""
    return [store.create_category(name, color) for name, color in DEFAULT_CATEGORIES]
