"""Configuration models with Pydantic validation."""

from backstep.domain.config.app import AppConfig
from backstep.domain.config.backoff import BackoffConfig
from backstep.domain.config.intervals import IntervalsConfig

__all__ = [
    "AppConfig",
    "BackoffConfig",
    "IntervalsConfig",
]
