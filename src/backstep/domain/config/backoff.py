"""Retry loop configuration model."""

from datetime import timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from backstep.domain.tries import INFINITE_TRIES


class BackoffConfig(BaseModel):
    """Configuration for the retry loop.

    Attributes:
        tries: Maximum number of calls (127 = unlimited)
        timeout: Overall deadline for the retry session (None = no deadline)
    """

    tries: int = Field(5, ge=1, le=INFINITE_TRIES)
    timeout: Optional[timedelta] = Field(None, gt=timedelta(0))

    model_config = ConfigDict(extra="forbid")
