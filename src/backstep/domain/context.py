"""Cooperative cancellation signal shared by an operation and the retry loop."""

from __future__ import annotations

import logging
import threading
import time
from datetime import timedelta
from typing import Optional, Union

logger = logging.getLogger(__name__)


class Context:
    """Cancellation context backed by a threading.Event

    The same context is passed to the operation and used by the retry loop
    while it waits, so a single cancel() unblocks both. A context created
    with with_timeout() cancels itself once its deadline passes.

    Use it as a context manager to release the deadline timer on exit:

        with Context.with_timeout(10) as ctx:
            Backoff(default_binary_exponential()).retry(ctx, 5, fetch)
    """

    def __init__(self, deadline: Optional[float] = None):
        """Initialize context

        Args:
            deadline: Optional time.monotonic() value after which the context
                cancels itself
        """
        self._done = threading.Event()
        self._deadline = deadline
        self._timer: Optional[threading.Timer] = None
        if deadline is not None:
            delay = max(deadline - time.monotonic(), 0.0)
            self._timer = threading.Timer(delay, self._expire)
            self._timer.daemon = True
            self._timer.start()

    @classmethod
    def background(cls) -> Context:
        """Create a context that is only done when cancelled explicitly."""
        return cls()

    @classmethod
    def with_timeout(cls, timeout: Union[float, timedelta]) -> Context:
        """Create a context that cancels itself after timeout

        Args:
            timeout: Seconds (or timedelta) until the context is done
        """
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        return cls(deadline=time.monotonic() + timeout)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline, None if there is no deadline."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def cancel(self) -> None:
        """Mark the context as done. Safe to call more than once."""
        self._done.set()
        if self._timer is not None:
            self._timer.cancel()

    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the context is done or timeout seconds pass

        Returns:
            True if the context is done
        """
        return self._done.wait(timeout)

    def _expire(self) -> None:
        logger.debug("Context deadline exceeded")
        self._done.set()

    def __enter__(self) -> Context:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()
