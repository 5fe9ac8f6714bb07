"""Exponential interval policy"""

import math
from dataclasses import dataclass
from datetime import timedelta

from backstep.domain.config.intervals import IntervalsConfig
from backstep.infrastructure.intervals.base import RESOLUTION, Intervals


@dataclass(frozen=True)
class Exponential(Intervals):
    """Exponential series: initial * (base // unit) ** i, capped at max."""

    base: timedelta
    unit: timedelta
    initial: timedelta
    max: timedelta

    @classmethod
    def from_config(cls, config: IntervalsConfig) -> "Exponential":
        return cls(
            base=config.base,
            unit=config.unit,
            initial=config.initial,
            max=config.max,
        )

    def next(self, i: int, last: timedelta) -> timedelta:
        """Return the interval for iteration i.

        `last` is deliberately ignored so a jitter layer can sit on top of a
        stable series; the cost is a floating point pow per call.
        """
        base = self.base // self.unit  # base without unit scalar
        try:
            power = math.pow(base, i)
        except OverflowError:
            return self.max
        if math.isinf(power):
            return self.max
        candidate = (self.initial // RESOLUTION) * power
        if candidate > self.max // RESOLUTION:
            return self.max
        return timedelta(microseconds=int(candidate))


def default_binary_exponential() -> Exponential:
    """Binary exponential series: 0.5s, 1s, 2s, 4s, 8s, 16s, 20s, 20s, ..."""
    return Exponential(
        base=timedelta(seconds=2),
        unit=timedelta(seconds=1),
        initial=timedelta(milliseconds=500),
        max=timedelta(seconds=20),
    )
