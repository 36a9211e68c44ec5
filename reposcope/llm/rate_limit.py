"""Throttle classification and the single-retry wrapper for model calls.

A throttled call is retried at most once. The wait comes from the
provider's "try again in ..." hint:

- hour-scale hint: exhausted, no retry
- minute-scale hint: exhausted when the wait exceeds EXHAUSTED_THRESHOLD_MS,
  otherwise wait plus RETRY_BUFFER_MS and retry
- second or millisecond hint: wait plus RETRY_BUFFER_MS and retry
- no recognisable hint: wait DEFAULT_WAIT_MS and retry

A second throttle on the retry is exhausted. Non-throttle errors propagate.
"""

from __future__ import annotations

import asyncio
import logging
import math
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from reposcope.llm.models import LLMError

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXHAUSTED_THRESHOLD_MS = 12_000
RETRY_BUFFER_MS = 400
DEFAULT_WAIT_MS = 3_000

_HOUR_HINT = re.compile(r"try again in\s+\d+h", re.IGNORECASE)
_MS_HINT = re.compile(r"try again in\s+([\d.]+)ms", re.IGNORECASE)
_MINUTE_HINT = re.compile(r"try again in\s+(\d+)m(?!s)(?:([\d.]+)s)?", re.IGNORECASE)
_SECOND_HINT = re.compile(r"try again in\s+([\d.]+)s", re.IGNORECASE)


@dataclass(frozen=True)
class RetryAfter:
    """Throttled briefly; retry once after ``wait_ms``."""

    wait_ms: int


@dataclass(frozen=True)
class Exhausted:
    """Throttled for longer than a request can wait."""

    reason: str


ThrottleDecision = RetryAfter | Exhausted


def classify_throttle(message: str) -> ThrottleDecision:
    """Turn a throttling error message into a retry-or-exhausted decision."""
    if _HOUR_HINT.search(message):
        return Exhausted(reason="hour-scale wait")

    if m := _MS_HINT.search(message):
        return RetryAfter(wait_ms=math.ceil(float(m.group(1))) + RETRY_BUFFER_MS)

    if m := _MINUTE_HINT.search(message):
        seconds = int(m.group(1)) * 60 + float(m.group(2) or 0)
        wait_ms = math.ceil(seconds * 1000)
        if wait_ms > EXHAUSTED_THRESHOLD_MS:
            return Exhausted(reason=f"wait of {wait_ms}ms exceeds threshold")
        return RetryAfter(wait_ms=wait_ms + RETRY_BUFFER_MS)

    if m := _SECOND_HINT.search(message):
        return RetryAfter(wait_ms=math.ceil(float(m.group(1)) * 1000) + RETRY_BUFFER_MS)

    return RetryAfter(wait_ms=DEFAULT_WAIT_MS)


def is_throttle_error(err: BaseException) -> bool:
    """True for HTTP 429 style failures from any provider adapter."""
    if isinstance(err, LLMError) and err.retryable:
        return True
    return "429" in str(err)


@dataclass(frozen=True)
class CallOutcome(Generic[T]):
    """Result of a rate-limit protected call: ``ok`` with a value, or ``exhausted``."""

    status: Literal["ok", "exhausted"]
    value: T | None = None
    reason: str | None = None
    attempts: int = 1

    @classmethod
    def ok(cls, value: T, attempts: int = 1) -> CallOutcome[T]:
        return cls(status="ok", value=value, attempts=attempts)

    @classmethod
    def exhausted(cls, reason: str, attempts: int = 1) -> CallOutcome[T]:
        return cls(status="exhausted", reason=reason, attempts=attempts)

    @property
    def is_exhausted(self) -> bool:
        return self.status == "exhausted"


async def call_with_rate_limit_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    label: str = "llm",
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> CallOutcome[T]:
    """Run ``fn`` with at most one throttle retry.

    Args:
        fn: Zero-argument coroutine factory; called once or twice.
        label: Name used in log lines.
        sleep: Injected for tests; receives seconds.

    Returns:
        ``CallOutcome.ok`` with the call result, or ``CallOutcome.exhausted``.

    Raises:
        Whatever ``fn`` raises for non-throttle failures.
    """
    try:
        return CallOutcome.ok(await fn())
    except Exception as e:
        if not is_throttle_error(e):
            raise
        first_error = e

    logger.warning("%s: throttled on first attempt: %s", label, first_error)
    decision = classify_throttle(str(first_error))
    if isinstance(decision, Exhausted):
        logger.warning("%s: rate limit exhausted (%s)", label, decision.reason)
        return CallOutcome.exhausted(decision.reason)

    logger.info("%s: waiting %dms before retry", label, decision.wait_ms)
    await sleep(decision.wait_ms / 1000)

    try:
        return CallOutcome.ok(await fn(), attempts=2)
    except Exception as e:
        if not is_throttle_error(e):
            raise
        logger.warning("%s: throttled on retry, rate limit exhausted: %s", label, e)
        return CallOutcome.exhausted(str(e), attempts=2)
