"""Interval policies"""

from backstep.infrastructure.intervals.base import Intervals
from backstep.infrastructure.intervals.exponential import (
    Exponential,
    default_binary_exponential,
)
from backstep.infrastructure.intervals.factory import IntervalsFactory
from backstep.infrastructure.intervals.jitter import (
    ExponentialJitter,
    default_binary_exponential_jitter,
)

__all__ = [
    "Exponential",
    "ExponentialJitter",
    "Intervals",
    "IntervalsFactory",
    "default_binary_exponential",
    "default_binary_exponential_jitter",
]
