"""Anthropic Claude adapter."""

from __future__ import annotations

from anthropic import APIError, AsyncAnthropic, RateLimitError

from reposcope.llm.base import LLMProvider
from reposcope.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage


def _text_of(blocks) -> str | None:
    texts = [b.text for b in blocks or () if isinstance(getattr(b, "text", None), str)]
    return "".join(texts) if texts else None


class ClaudeProvider(LLMProvider):
    """Messages API adapter; the system prompt goes in its own field."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        # api_key=None lets the SDK read ANTHROPIC_API_KEY
        self._client = AsyncAnthropic(
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
        try:
            message = await self._client.messages.create(
                system=system,
                messages=[{"role": "user", "content": user}],
                **self._sampling(max_tokens, temperature),
            )
        except APIError as e:
            raise LLMError("claude", "generate", e, retryable=isinstance(e, RateLimitError)) from e

        text = _text_of(message.content)
        if text is None:
            raise ValueError("No text content in Claude response")
        return LLMResponse(
            content=text,
            model=message.model,
            usage=TokenUsage(
                input_tokens=message.usage.input_tokens,
                output_tokens=message.usage.output_tokens,
            ),
        )
