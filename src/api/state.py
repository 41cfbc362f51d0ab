from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from llm.llm_client import LLMClient
from smart_todo.config import SEED_DEFAULT_CATEGORIES
from storage.entity_store import EntityStore
from storage.seed import seed_default_categories
from suggestions.suggestion_engine import SuggestionEngine


@dataclass
class AppState:
    """Everything a running app owns: one store and one suggestion engine per process."""

    store: EntityStore
    suggestion_engine: SuggestionEngine
    clock: Callable[[], datetime] = field(default=datetime.now)


def build_state(
    store: Optional[EntityStore] = None,
    llm_client: Optional[LLMClient] = None,
    seed_categories: bool = SEED_DEFAULT_CATEGORIES,
    clock: Callable[[], datetime] = datetime.now,
) -> AppState:
    if store is None:
        store = EntityStore(clock=clock)
        if seed_categories:
            seed_default_categories(store)

    return AppState(
        store=store,
        suggestion_engine=SuggestionEngine(llm_client=llm_client or LLMClient(), clock=clock),
        clock=clock,
    )
