"""Retry loop for coroutine operations."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from backstep.domain.errors import AllTriesFailed, BackoffContextTimeoutExceeded
from backstep.domain.tries import (
    INFINITE_TRIES,
    next_iteration,
    validate_iteration,
    validate_tries,
)
from backstep.infrastructure.intervals.base import Intervals

logger = logging.getLogger(__name__)

AsyncCompletable = Callable[[asyncio.Event], Awaitable[bool]]
AsyncTimer = Callable[[timedelta], Awaitable[None]]


async def default_async_timer(duration: timedelta) -> None:
    await asyncio.sleep(max(duration.total_seconds(), 0.0))


class AsyncBackoff:
    """asyncio counterpart of Backoff

    The cancellation signal is an asyncio.Event; setting it stops the wait
    between calls and is passed to the operation so it can stop early.
    """

    def __init__(self, intervals: Intervals, timer: Optional[AsyncTimer] = None):
        self.intervals = intervals
        self.timer = timer or default_async_timer

    async def retry(self, cancel: asyncio.Event, tries: int, fn: AsyncCompletable) -> None:
        """Await fn until it returns True

        Raises:
            AllTriesFailed: If fn returned False `tries` times
            BackoffContextTimeoutExceeded: If cancel was set before fn succeeded
            ValueError: If tries is out of range
        """
        await self._retry(cancel, tries, fn, 0, timedelta(0))

    async def _retry(
        self,
        cancel: asyncio.Event,
        tries: int,
        fn: AsyncCompletable,
        init_i: int = 0,
        init_wait: timedelta = timedelta(0),
    ) -> None:
        validate_tries(tries)
        validate_iteration(init_i)

        wait = init_wait
        i = init_i
        attempt = 0
        while True:
            attempt += 1
            if await fn(cancel):
                logger.debug(f"Operation succeeded on attempt {attempt}")
                return
            if i + 1 >= tries and tries != INFINITE_TRIES:
                logger.warning(f"All {tries} tries failed")
                raise AllTriesFailed(tries)
            wait = self.intervals.next(i, wait)
            logger.debug(f"Attempt {attempt} failed, backing off for {wait}")
            if not await self._wait(wait, cancel):
                logger.info(f"Cancelled while backing off after attempt {attempt}")
                raise BackoffContextTimeoutExceeded()
            i = next_iteration(i)

    async def _wait(self, wait: timedelta, cancel: asyncio.Event) -> bool:
        """Race the timer against cancel. Returns True if the timer won."""
        timer = asyncio.ensure_future(self.timer(wait))
        cancelled = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {timer, cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (timer, cancelled):
                if not task.done():
                    task.cancel()
        # cancellation wins a tie
        if cancelled in done or cancel.is_set():
            return False
        timer.result()
        return True
