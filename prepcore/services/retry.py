"""
Purpose: Shared retry/backoff around a single external-service call.

Only transient failures are retried: HTTP-equivalent status 429/503 or an
error message mentioning overload or rate limiting. Anything else aborts at
once. After the last attempt the original exception is re-raised unchanged.

Testing: Inject ``sleep`` to record delays instead of waiting.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from ..errors import status_of

log = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_STATUSES = frozenset({429, 503})
TRANSIENT_CUES = ("overloaded", "rate limit")


def is_transient(exc: BaseException) -> bool:
    if status_of(exc) in TRANSIENT_STATUSES:
        return True
    msg = str(exc).lower()
    return any(cue in msg for cue in TRANSIENT_CUES)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt ``attempt`` (0-indexed)."""
        return self.base_delay * (2**attempt)


def with_retries(
    fn: Callable[[], T],
    policy: RetryPolicy = RetryPolicy(),
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    attempts = max(1, policy.max_attempts)
    for attempt in range(attempts):
        try:
            return fn()
        except Exception as e:
            last = attempt == attempts - 1
            if last or not is_transient(e):
                log.error("Final attempt failed or error is not retryable: %s", e)
                raise
            delay = policy.delay_for(attempt)
            log.warning(
                "Retry %d/%d after %.1fs due to: %s", attempt + 1, attempts, delay, e
            )
            sleep(delay)
    raise RuntimeError(f"API call failed after {attempts} attempts.")
