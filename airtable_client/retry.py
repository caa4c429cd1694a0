import logging
import time
from typing import Any, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from .errors import RateLimitError

logger = logging.getLogger(__name__)


class Deadline:
    """Wall-clock budget for one logical action, retries included."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.seconds = seconds
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0


def _bounded_wait(wait: Callable[[RetryCallState], float], deadline: Deadline):
    def _wait(retry_state: RetryCallState) -> float:
        return max(0.0, min(wait(retry_state), deadline.remaining()))

    return _wait


def _stop_at_deadline(deadline: Deadline):
    def _stop(retry_state: RetryCallState) -> bool:
        return deadline.expired

    return _stop


def rate_limit_retrying(
    deadline: Deadline,
    wait: Callable[[Any], float],
    enabled: bool = True,
) -> AsyncRetrying:
    """Retry only on 429s, as many times as the deadline allows.

    Sleeps are clamped to the time left, so the total wait never exceeds the
    request timeout. When the deadline passes the last RateLimitError is
    re-raised as is.
    """
    return AsyncRetrying(
        retry=retry_if_exception_type(RateLimitError),
        stop=_stop_at_deadline(deadline) if enabled else stop_after_attempt(1),
        wait=_bounded_wait(wait, deadline),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
