from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, TypeVar

from .errors import UpstreamServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_CODES = {"RESOURCE_EXHAUSTED"}
RATE_LIMIT_MESSAGES = ("quota", "rate limit", "too many requests")


def parse_retry_after(
    headers: Optional[Mapping[str, str]] = None,
    details: Optional[Iterable[Dict[str, Any]]] = None,
) -> Optional[float]:
    """Server-suggested delay in seconds from a Retry-After header or a RetryInfo detail."""
    if headers:
        raw = headers.get("retry-after") or headers.get("Retry-After")
        if raw:
            try:
                return float(raw)
            except ValueError:
                pass
    for detail in details or []:
        kind = str(detail.get("@type") or "")
        if "google.rpc.RetryInfo" not in kind:
            continue
        delay = detail.get("retryDelay") or detail.get("retry_delay")
        if isinstance(delay, str):
            digits = delay.strip().rstrip("s").split(".")[0]
            if digits.isdigit():
                return float(digits)
    return None


def is_rate_limited(exc: BaseException) -> bool:
    if isinstance(exc, UpstreamServiceError):
        if exc.status == 429 or (exc.code or "") in RATE_LIMIT_CODES:
            return True
    message = str(exc).lower()
    return any(m in message for m in RATE_LIMIT_MESSAGES)


@dataclass
class RetryPolicy:
    """Retry on rate-limit signals with server-suggested or exponential backoff."""

    max_attempts: int = 5
    base_delay_s: float = 1.0
    max_delay_s: float = 60.0
    jitter_s: float = 0.25
    is_retryable: Callable[[BaseException], bool] = is_rate_limited
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    rand: Callable[[], float] = field(default=random.random, repr=False)

    def backoff_s(self, attempt: int, exc: Optional[BaseException] = None) -> float:
        suggested = getattr(exc, "retry_after_s", None)
        if suggested is not None:
            delay = float(suggested)
        else:
            delay = min(self.max_delay_s, self.base_delay_s * 2 ** attempt)
        return delay + self.rand() * self.jitter_s

    def call(self, fn: Callable[[], T]) -> T:
        attempt = 0
        while True:
            try:
                return fn()
            except Exception as exc:
                if not self.is_retryable(exc) or attempt >= self.max_attempts - 1:
                    raise
                delay = self.backoff_s(attempt, exc)
                logger.warning(
                    "Rate limited (attempt %d/%d), retrying in %.2fs: %s",
                    attempt + 1,
                    self.max_attempts,
                    delay,
                    exc,
                )
                self.sleep(delay)
                attempt += 1


