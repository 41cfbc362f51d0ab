from datetime import datetime

from fastapi import Request

from api.state import AppState
from storage.entity_store import EntityStore
from suggestions.suggestion_engine import SuggestionEngine


def get_app_state(request: Request) -> AppState:
    return request.app.state.smart_todo


def get_store(request: Request) -> EntityStore:
    return get_app_state(request).store


def get_suggestion_engine(request: Request) -> SuggestionEngine:
    return get_app_state(request).suggestion_engine


def get_now(request: Request) -> datetime:
    return get_app_state(request).clock()
