from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

class LLMProvider(ABC):
    @abstractmethod
    def generate(
        self,
        *,
        system: str,
        user: str,
        model: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Must return the model output as TEXT (parsing/validation happens in LLMClient).
        Transport errors and timeouts propagate to the caller.
        """
        raise NotImplementedError
