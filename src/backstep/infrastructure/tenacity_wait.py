"""tenacity integration for interval policies.

Lets an Intervals policy drive tenacity's wait, and builds tenacity retry
decorators for boolean operations so callers already on tenacity can share
the same series.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Callable, Optional

from tenacity import (
    RetryCallState,
    RetryError,
    before_sleep_log,
    retry,
    retry_if_result,
    stop_after_attempt,
    stop_never,
)
from tenacity.wait import wait_base

from backstep.domain.errors import AllTriesFailed
from backstep.domain.tries import INFINITE_TRIES, MAX_ITERATION, validate_tries
from backstep.infrastructure.intervals.base import Intervals

logger = logging.getLogger(__name__)


class wait_intervals(wait_base):
    """Wait strategy computing each sleep from an Intervals policy."""

    def __init__(self, intervals: Intervals) -> None:
        self.intervals = intervals

    def __call__(self, retry_state: RetryCallState) -> float:
        i = min(retry_state.attempt_number - 1, MAX_ITERATION)
        last = timedelta(seconds=getattr(retry_state, "upcoming_sleep", 0.0) or 0.0)
        wait = self.intervals.next(i, last)
        return max(wait.total_seconds(), 0.0)


def _is_failure(result: Any) -> bool:
    return not result


def create_retry_decorator(
    intervals: Intervals,
    tries: int,
    sleep: Optional[Callable[[float], None]] = None,
) -> Callable[[Callable[..., bool]], Callable[..., bool]]:
    """Create a tenacity retry decorator for a boolean operation.

    The decorated function is called until it returns a truthy value. Its
    exceptions are not retried and propagate unchanged.

    Args:
        intervals: Interval policy driving the waits
        tries: Maximum number of calls, or INFINITE_TRIES
        sleep: Optional sleep function (defaults to tenacity's)

    Returns:
        Retry decorator. The wrapped function raises AllTriesFailed when
        every call returned a falsy value.
    """
    validate_tries(tries)
    stop = stop_never if tries == INFINITE_TRIES else stop_after_attempt(tries)

    retry_kwargs = {
        "stop": stop,
        "wait": wait_intervals(intervals),
        "retry": retry_if_result(_is_failure),
        "before_sleep": before_sleep_log(logger, logging.DEBUG),
    }
    if sleep is not None:
        retry_kwargs["sleep"] = sleep

    def decorator(func: Callable[..., bool]) -> Callable[..., bool]:
        retried_func = retry(**retry_kwargs)(func)

        def wrapped(*args: Any, **kwargs: Any) -> bool:
            try:
                return retried_func(*args, **kwargs)
            except RetryError as e:
                logger.warning(f"All {tries} tries failed")
                raise AllTriesFailed(tries) from e

        return wrapped

    return decorator
