from datetime import datetime, timedelta

import pytest

from storage.entity_store import EntityStore


class FakeProvider:
    def __init__(self, response_text: str):
        self._response_text = response_text
        self.calls = []

    def generate(self, *, system: str, user: str, **kwargs) -> str:
        self.calls.append({"system": system, "user": user, **kwargs})
        return self._response_text


class FailingProvider:
    def __init__(self, exc: Exception):
        self._exc = exc

    def generate(self, *, system: str, user: str, **kwargs) -> str:
        raise self._exc


class FakeClock:
    """Returns a fixed instant that moves forward one second per reading."""

    def __init__(self, start: datetime = datetime(2024, 1, 10, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture
def failing_provider_factory():
    def _make(exc: Exception):
        return FailingProvider(exc)
    return _make


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return EntityStore(clock=clock)
