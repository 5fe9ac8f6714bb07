"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from backstep.domain.config.backoff import BackoffConfig
from backstep.domain.config.intervals import IntervalsConfig


class AppConfig(BaseModel):
    """Main application configuration.

    Root model aggregating all configuration sections. Validation is performed
    at load time to fail fast on configuration errors.

    Attributes:
        intervals: Interval policy configuration
        backoff: Retry loop configuration
    """

    intervals: IntervalsConfig = Field(default_factory=IntervalsConfig)
    backoff: BackoffConfig = Field(default_factory=BackoffConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )
