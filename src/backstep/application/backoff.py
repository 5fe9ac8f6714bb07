"""Retry loop with pluggable interval policies."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable, Optional

from backstep.domain.context import Context
from backstep.domain.errors import AllTriesFailed, BackoffContextTimeoutExceeded
from backstep.domain.tries import (
    INFINITE_TRIES,
    next_iteration,
    validate_iteration,
    validate_tries,
)
from backstep.infrastructure.intervals.base import Intervals

logger = logging.getLogger(__name__)

# Called with the cancellation context; returns True once it has succeeded.
# It should return early (False) when the context is done.
Completable = Callable[[Context], bool]

# Waits for the duration or until the context is done. Returns True when the
# full duration elapsed.
Timer = Callable[[timedelta, Context], bool]


def default_timer(duration: timedelta, ctx: Context) -> bool:
    """Wait on the context's event for duration; negative waits are zero."""
    return not ctx.wait(max(duration.total_seconds(), 0.0))


class Backoff:
    """Calls an operation until it succeeds, waiting between failed calls

    The instance keeps no per-call state, so it may be reused. Jittered
    policies carry a Random that should not be shared between concurrent
    retry sessions.
    """

    def __init__(self, intervals: Intervals, timer: Optional[Timer] = None):
        """Initialize backoff

        Args:
            intervals: Interval policy (e.g. default_binary_exponential())
            timer: Wait function, mainly for tests (default: default_timer)
        """
        self.intervals = intervals
        self.timer = timer or default_timer

    def retry(self, ctx: Context, tries: int, fn: Completable) -> None:
        """Call fn until it returns True

        Args:
            ctx: Cancellation context, passed to fn and watched while waiting
            tries: Maximum number of calls, or INFINITE_TRIES
            fn: Operation to call

        Raises:
            AllTriesFailed: If fn returned False `tries` times
            BackoffContextTimeoutExceeded: If ctx was done before fn succeeded
            ValueError: If tries is out of range
        """
        self._retry(ctx, tries, fn, 0, timedelta(0))

    def _retry(
        self,
        ctx: Context,
        tries: int,
        fn: Completable,
        init_i: int = 0,
        init_wait: timedelta = timedelta(0),
    ) -> None:
        """Run the loop starting at a given point in the interval series.

        The default start is init_i = 0, init_wait = 0.
        """
        validate_tries(tries)
        validate_iteration(init_i)

        wait = init_wait
        i = init_i
        attempt = 0
        while True:
            attempt += 1
            if fn(ctx):
                logger.debug(f"Operation succeeded on attempt {attempt}")
                return
            if i + 1 >= tries and tries != INFINITE_TRIES:
                logger.warning(f"All {tries} tries failed")
                raise AllTriesFailed(tries)
            wait = self.intervals.next(i, wait)
            logger.debug(f"Attempt {attempt} failed, backing off for {wait}")
            if not self.timer(wait, ctx):
                logger.info(f"Context done while backing off after attempt {attempt}")
                raise BackoffContextTimeoutExceeded()
            i = next_iteration(i)
