"""backstep - retry with exponential backoff"""

from backstep.application.async_backoff import AsyncBackoff
from backstep.application.backoff import Backoff, default_timer
from backstep.domain.context import Context
from backstep.domain.errors import (
    AllTriesFailed,
    BackoffContextTimeoutExceeded,
    BackoffError,
    SeedError,
)
from backstep.domain.tries import INFINITE_TRIES
from backstep.infrastructure.intervals import (
    Exponential,
    ExponentialJitter,
    Intervals,
    IntervalsFactory,
    default_binary_exponential,
    default_binary_exponential_jitter,
)

__all__ = [
    "AllTriesFailed",
    "AsyncBackoff",
    "Backoff",
    "BackoffContextTimeoutExceeded",
    "BackoffError",
    "Context",
    "Exponential",
    "ExponentialJitter",
    "INFINITE_TRIES",
    "Intervals",
    "IntervalsFactory",
    "SeedError",
    "default_binary_exponential",
    "default_binary_exponential_jitter",
    "default_timer",
]
