"""Base interval policy interface"""

from abc import ABC, abstractmethod
from datetime import timedelta

# Integer resolution of every computed wait.
RESOLUTION = timedelta(microseconds=1)


class Intervals(ABC):
    """Abstract base class for backoff interval policies

    Subclass and register with IntervalsFactory to plug in a custom series.
    """

    @abstractmethod
    def next(self, i: int, last: timedelta) -> timedelta:
        """Compute the wait before the next call

        Args:
            i: Current iteration, 0 after the first failed call. Saturates at
                MAX_ITERATION when retrying with INFINITE_TRIES.
            last: Wait used for the previous iteration, zero on the first

        Returns:
            Duration to wait
        """
        pass
