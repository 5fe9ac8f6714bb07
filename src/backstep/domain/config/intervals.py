"""Interval policy configuration model."""

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IntervalsConfig(BaseModel):
    """Configuration for the interval policy.

    Durations accept seconds (int/float), ISO 8601 durations or timedelta.

    Attributes:
        kind: Registered policy name (exponential, exponential_jitter, ...)
        base: Growth base; divided by unit before exponentiation
        unit: Time scale stripped from base
        initial: Wait after the first failed call
        max: Ceiling for the wait
        jitter_max: Maximum +/- offset added by jittered policies
    """

    kind: str = "exponential"
    base: timedelta = Field(timedelta(seconds=2), ge=timedelta(0))
    unit: timedelta = Field(timedelta(seconds=1), gt=timedelta(0))
    initial: timedelta = Field(timedelta(milliseconds=500), ge=timedelta(0))
    max: timedelta = Field(timedelta(seconds=20), ge=timedelta(0))
    jitter_max: timedelta = Field(timedelta(milliseconds=500), ge=timedelta(0))

    model_config = ConfigDict(extra="forbid")

    @field_validator("kind")
    @classmethod
    def _normalize_kind(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("kind must not be empty")
        return value
