"""Factory for creating interval policies"""

import logging
from typing import Dict, Type

from backstep.domain.config.intervals import IntervalsConfig
from backstep.infrastructure.intervals.base import Intervals
from backstep.infrastructure.intervals.exponential import Exponential
from backstep.infrastructure.intervals.jitter import ExponentialJitter

logger = logging.getLogger(__name__)


class IntervalsFactory:
    """Factory for creating interval policy instances

    Registered classes must provide a `from_config(IntervalsConfig)`
    classmethod.
    """

    POLICIES: Dict[str, Type[Intervals]] = {
        "exponential": Exponential,
        "exponential_jitter": ExponentialJitter,
    }

    @classmethod
    def register(cls, kind: str, policy_class: Type[Intervals]) -> None:
        """Register a custom interval policy

        Args:
            kind: Name used in IntervalsConfig.kind
            policy_class: Intervals subclass with a from_config classmethod

        Raises:
            ValueError: If policy_class cannot be built from configuration
        """
        if not (isinstance(policy_class, type) and issubclass(policy_class, Intervals)):
            raise ValueError(f"{policy_class!r} is not an Intervals subclass")
        if not callable(getattr(policy_class, "from_config", None)):
            raise ValueError(f"{policy_class.__name__} must define from_config()")
        cls.POLICIES[kind.lower()] = policy_class
        logger.debug(f"Registered interval policy {kind.lower()}: {policy_class.__name__}")

    @classmethod
    def create(cls, config: IntervalsConfig = None) -> Intervals:
        """Create interval policy instance

        Args:
            config: Interval configuration (defaults if None)

        Returns:
            Intervals instance

        Raises:
            ValueError: If the policy kind is not registered
            SeedError: If a jittered policy cannot be seeded
        """
        if config is None:
            config = IntervalsConfig()

        kind = config.kind.lower()
        if kind not in cls.POLICIES:
            available = ", ".join(cls.POLICIES.keys())
            raise ValueError(
                f"Unknown interval policy: {config.kind}. "
                f"Available policies: {available}"
            )

        policy_class = cls.POLICIES[kind]
        logger.info(f"Creating {kind} interval policy")
        return policy_class.from_config(config)
