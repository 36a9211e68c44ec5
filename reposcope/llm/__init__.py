"""LLM provider abstraction layer."""

from reposcope.llm.base import LLMProvider
from reposcope.llm.claude import ClaudeProvider
from reposcope.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage
from reposcope.llm.openai_adapter import OpenAIProvider
from reposcope.llm.pool import (
    AlternatingSecondaryPolicy,
    LLMClientPool,
    SelectionPolicy,
    create_client_pool,
)
from reposcope.llm.rate_limit import (
    CallOutcome,
    Exhausted,
    RetryAfter,
    call_with_rate_limit_retry,
    classify_throttle,
    is_throttle_error,
)

__all__ = [
    "AlternatingSecondaryPolicy",
    "CallOutcome",
    "ClaudeProvider",
    "Exhausted",
    "LLMClientPool",
    "LLMConfig",
    "LLMError",
    "LLMProvider",
    "LLMResponse",
    "OpenAIProvider",
    "RetryAfter",
    "SelectionPolicy",
    "TokenUsage",
    "call_with_rate_limit_retry",
    "classify_throttle",
    "create_client_pool",
    "is_throttle_error",
]
