"""Test doubles recording what the retry loop does."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import List

from backstep.application.backoff import default_timer
from backstep.domain.context import Context

CASE_DONE = "case:ctx.done"
CASE_AFTER = "case:after"
CASE_RETURN_FALSE = "return:false"
CASE_RETURN_TRUE = "return:true"


class FnLogger:
    """Operation that takes `delay` seconds and succeeds on call true_after_n + 1.

    Returns False right away, logging CASE_DONE, if the context is done first.
    """

    def __init__(self, delay: float, true_after_n: int):
        self.delay = delay
        self.true_after_n = true_after_n
        self.calls = 0
        self.events: List[str] = []

    def __call__(self, ctx: Context) -> bool:
        if ctx.wait(self.delay):
            self.events.extend([CASE_DONE, CASE_RETURN_FALSE])
            return False
        return self._complete()

    def _complete(self) -> bool:
        self.events.append(CASE_AFTER)
        if self.calls >= self.true_after_n:
            self.events.append(CASE_RETURN_TRUE)
            return True
        self.calls += 1
        self.events.append(CASE_RETURN_FALSE)
        return False


class AsyncFnLogger(FnLogger):
    async def __call__(self, cancel: asyncio.Event) -> bool:
        if not cancel.is_set():
            try:
                await asyncio.wait_for(cancel.wait(), timeout=self.delay)
            except asyncio.TimeoutError:
                return self._complete()
        self.events.extend([CASE_DONE, CASE_RETURN_FALSE])
        return False


class RecordingTimer:
    """Timer logging the requested pause durations before waiting."""

    def __init__(self):
        self.durations: List[timedelta] = []

    def __call__(self, duration: timedelta, ctx: Context) -> bool:
        self.durations.append(duration)
        return default_timer(duration, ctx)
