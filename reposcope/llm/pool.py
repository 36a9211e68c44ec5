"""Credential pool: one primary for heavy calls, secondaries for light calls."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from typing import Protocol

from reposcope.config.models import LLMSettings
from reposcope.llm.base import LLMProvider
from reposcope.llm.claude import ClaudeProvider
from reposcope.llm.models import LLMConfig
from reposcope.llm.openai_adapter import OpenAIProvider

logger = logging.getLogger(__name__)

_PROVIDER_MAP: dict[str, type[LLMProvider]] = {
    "anthropic": ClaudeProvider,
    "openai": OpenAIProvider,
}


class SelectionPolicy(Protocol):
    def select_light(
        self, primary: LLMProvider, secondaries: Sequence[LLMProvider], ordinal: int
    ) -> LLMProvider: ...


class AlternatingSecondaryPolicy:
    """Round-robin over secondaries by ordinal; primary when there are none."""

    def select_light(
        self, primary: LLMProvider, secondaries: Sequence[LLMProvider], ordinal: int
    ) -> LLMProvider:
        if not secondaries:
            return primary
        return secondaries[abs(ordinal) % len(secondaries)]


class LLMClientPool:
    """Explicitly constructed set of provider clients.

    ``heavy()`` is used for architecture, route catalog and execution
    trace calls. ``light(ordinal)`` is used for route-relevance calls so
    they spend secondary quota instead of the primary's.
    """

    def __init__(
        self,
        primary: LLMProvider,
        secondaries: Sequence[LLMProvider] = (),
        policy: SelectionPolicy | None = None,
    ) -> None:
        self.primary = primary
        self.secondaries = tuple(secondaries)
        self.policy = policy or AlternatingSecondaryPolicy()

    def __len__(self) -> int:
        return 1 + len(self.secondaries)

    def heavy(self) -> LLMProvider:
        return self.primary

    def light(self, ordinal: int = 0) -> LLMProvider:
        return self.policy.select_light(self.primary, self.secondaries, ordinal)


def _build_provider(settings: LLMSettings, api_key: str, label: str) -> LLMProvider:
    cls = _PROVIDER_MAP.get(settings.provider)
    if cls is None:
        raise ValueError(
            f"Unsupported LLM provider: {settings.provider!r}. "
            f"Supported: {', '.join(_PROVIDER_MAP)}"
        )
    llm_config = LLMConfig(
        provider=settings.provider,
        model=settings.model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        api_key=api_key,
        base_url=settings.base_url,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
        label=label,
    )
    return cls(llm_config)


def create_client_pool(settings: LLMSettings) -> LLMClientPool:
    """Build a pool from app-level settings.

    The primary key comes from ``settings.api_key_env`` and is required.
    Secondary env vars that are unset are skipped, so the pool holds
    between one and N credentials.
    """
    api_key = os.environ.get(settings.api_key_env)
    if not api_key:
        raise ValueError(
            f"Missing API key: set environment variable {settings.api_key_env!r}"
        )
    primary = _build_provider(settings, api_key, "primary")

    secondaries: list[LLMProvider] = []
    for env_name in settings.secondary_key_envs:
        key = os.environ.get(env_name)
        if not key:
            logger.debug("Secondary credential %s not set, skipping", env_name)
            continue
        secondaries.append(_build_provider(settings, key, env_name))

    if not secondaries:
        logger.info("No secondary credentials configured; light calls use the primary")
    return LLMClientPool(primary, secondaries)
