"""Abstract LLM interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from reposcope.llm.models import LLMConfig, LLMResponse


class LLMProvider(ABC):
    """Provider-agnostic one-shot chat completion.

    Adapters raise LLMError on SDK failures, with ``retryable=True`` for
    throttling so the rate-limit wrapper can classify them.
    """

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    @property
    def label(self) -> str:
        return self.config.label

    def _sampling(self, max_tokens: int | None, temperature: float | None) -> dict[str, Any]:
        """Request kwargs shared by every adapter, falling back to config."""
        return {
            "model": self.config.model,
            "max_tokens": max_tokens or self.config.max_tokens,
            "temperature": self.config.temperature if temperature is None else temperature,
        }

    @abstractmethod
    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """Generate a complete response.

        ``max_tokens`` and ``temperature`` default to the config values.
        """
        ...
