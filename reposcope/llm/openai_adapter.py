"""OpenAI-compatible adapter (OpenAI, Groq, and other compatible endpoints)."""

from __future__ import annotations

from openai import APIError, AsyncOpenAI, RateLimitError

from reposcope.llm.base import LLMProvider
from reposcope.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage


class OpenAIProvider(LLMProvider):
    """Chat-completions adapter; ``base_url`` selects Groq or another host."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        # api_key=None lets the SDK read OPENAI_API_KEY
        self._client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]
        try:
            response = await self._client.chat.completions.create(
                messages=messages, **self._sampling(max_tokens, temperature)
            )
        except APIError as e:
            raise LLMError("openai", "generate", e, retryable=isinstance(e, RateLimitError)) from e

        if not response.choices:
            raise ValueError("No choices in OpenAI response")
        usage = TokenUsage()
        if response.usage is not None:
            usage = TokenUsage(
                input_tokens=response.usage.prompt_tokens,
                output_tokens=response.usage.completion_tokens,
            )
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model,
            usage=usage,
        )
