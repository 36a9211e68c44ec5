"""Pydantic models for the LLM subsystem."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class LLMError(Exception):
    """An SDK failure tagged with the adapter and call that produced it.

    ``retryable`` is set for HTTP 429 responses; the rate-limit wrapper
    reads the wait hint from the message text.
    """

    def __init__(
        self, provider: str, operation: str, cause: Exception, retryable: bool = False
    ) -> None:
        super().__init__(f"{provider} {operation} failed: {cause}")
        self.provider = provider
        self.operation = operation
        self.cause = cause
        self.retryable = retryable
        self.__cause__ = cause


class LLMConfig(BaseModel):
    """One credential: which SDK, which model, and how to sample."""

    provider: Literal["openai", "anthropic"]
    model: str
    api_key: str | None = None
    base_url: str | None = None
    label: str = "primary"
    max_tokens: int = Field(default=8192, gt=0)
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    timeout: float = 120.0
    # SDK-level retries stay off; throttling is handled by classify_throttle.
    max_retries: int = 0


class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total(self) -> int:
        return self.input_tokens + self.output_tokens


class LLMResponse(BaseModel):
    """Text of a completion plus the model that served it."""

    content: str
    model: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
