"""Exponential interval policy with random jitter"""

import logging
import random
import secrets
from dataclasses import dataclass
from datetime import timedelta

from backstep.domain.config.intervals import IntervalsConfig
from backstep.domain.errors import SeedError
from backstep.infrastructure.intervals.base import RESOLUTION, Intervals
from backstep.infrastructure.intervals.exponential import (
    Exponential,
    default_binary_exponential,
)

logger = logging.getLogger(__name__)

_SEED_MAX = 2**63 - 1


def new_rand() -> random.Random:
    """Create a fast PRNG seeded once from the OS secure random source

    Raises:
        SeedError: If the secure source fails
    """
    try:
        seed = secrets.randbelow(_SEED_MAX)
    except (OSError, NotImplementedError) as e:
        logger.error(f"Secure random seed unavailable: {e}")
        raise SeedError(f"failed to seed random source: {e}") from e
    return random.Random(seed)


@dataclass
class ExponentialJitter(Intervals):
    """Exponential series with a uniform offset in [-jitter_max, +jitter_max]
    added to every interval.

    The result is not clamped: values range from base - jitter_max (which may
    be negative) to max + jitter_max. Timers treat negative waits as zero.

    The Random instance is not safe for concurrent use; give each concurrent
    retry session its own policy.
    """

    exponential: Exponential
    jitter_max: timedelta
    rand: random.Random

    def __post_init__(self):
        if self.jitter_max < timedelta(0):
            raise ValueError(f"jitter_max must not be negative, got {self.jitter_max}")

    @classmethod
    def from_config(cls, config: IntervalsConfig) -> "ExponentialJitter":
        """Build from configuration, seeding a new random source

        Raises:
            SeedError: If the secure source fails
        """
        return cls(
            exponential=Exponential.from_config(config),
            jitter_max=config.jitter_max,
            rand=new_rand(),
        )

    @property
    def max(self) -> timedelta:
        return self.exponential.max

    def next(self, i: int, last: timedelta) -> timedelta:
        """Return the jittered interval for iteration i.

        Seeded from the secure source, so values look non-deterministic.
        """
        jitter_max = self.jitter_max // RESOLUTION
        jitter = self.rand.randint(-jitter_max, jitter_max)
        return self.exponential.next(i, last) + timedelta(microseconds=jitter)


def default_binary_exponential_jitter() -> ExponentialJitter:
    """default_binary_exponential with each interval moved by up to +/-500ms

    Raises:
        SeedError: If the secure source fails
    """
    return ExponentialJitter(
        exponential=default_binary_exponential(),
        jitter_max=timedelta(milliseconds=500),
        rand=new_rand(),
    )
