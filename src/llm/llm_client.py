from __future__ import annotations

import json
import logging
import os
from typing import Any, Optional

import httpx

from llm.providers.base import LLMProvider
from smart_todo.config import LLM_PROVIDER, LLM_TIMEOUT_S
from smart_todo.errors import OracleError

logger = logging.getLogger(__name__)


def build_provider(name: str = LLM_PROVIDER, timeout: float = LLM_TIMEOUT_S) -> LLMProvider:
    """Instantiate the provider named by ``LLM_PROVIDER``."""
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider

        return OllamaProvider(timeout=timeout)
    if name == "mock":
        from llm.providers.mock_provider import MockProvider

        return MockProvider()
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider

        return OpenAIProvider(timeout=timeout)
    raise ValueError(f"Unknown LLM provider: {name}")


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the first JSON object in ``text``, tolerating prose or code fences around it."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise OracleError("No JSON object in oracle reply")

    try:
        data = json.loads(text[start : end + 1])
    except (json.JSONDecodeError, RecursionError) as e:
        raise OracleError(f"Invalid JSON in oracle reply: {e}") from e

    if not isinstance(data, dict):
        raise OracleError("Oracle reply is not a JSON object")
    return data


class LLMClient:
    """Thin wrapper over an LLMProvider with a 'model tier' knob.

    Every failure of the underlying provider (missing credentials, connection
    problems, HTTP errors, timeouts, empty replies) comes out as OracleError.
    """

    def __init__(self, provider: Optional[LLMProvider] = None, provider_name: str = LLM_PROVIDER):
        self._provider = provider
        self._provider_name = provider_name

    def _select_model_name(self, model_tier: str) -> Optional[str]:
        # None lets the provider use its own configured model
        if model_tier == "small":
            return os.getenv("LLM_MODEL_SMALL") or None
        return os.getenv("LLM_MODEL_LARGE") or None

    def _get_provider(self) -> LLMProvider:
        if self._provider is None:
            try:
                self._provider = build_provider(self._provider_name)
            except (RuntimeError, ValueError) as e:
                raise OracleError(f"LLM provider unavailable: {e}") from e
        return self._provider

    def complete(
        self,
        *,
        system: str,
        user: str,
        model_tier: str = "large",
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
    ) -> str:
        provider = self._get_provider()
        model = self._select_model_name(model_tier)

        try:
            text = provider.generate(
                system=system,
                user=user,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except httpx.TimeoutException as e:
            raise OracleError(f"Oracle call timed out: {e}") from e
        except httpx.HTTPError as e:
            raise OracleError(f"Oracle call failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise OracleError(f"Malformed oracle response: {e}") from e
        except Exception as e:
            raise OracleError(f"Oracle call failed: {e}") from e

        if not text or not text.strip():
            raise OracleError("Empty oracle reply")
        return text

    def complete_json(
        self,
        *,
        system: str,
        user: str,
        model_tier: str = "large",
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
    ) -> dict[str, Any]:
        text = self.complete(
            system=system,
            user=user,
            model_tier=model_tier,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return extract_json_object(text)
