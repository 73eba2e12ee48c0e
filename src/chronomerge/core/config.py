"""
Merge configuration for chronomerge.

Centralizes the refill tunables so that the driver, the scheduler and the
CLI agree on defaults and on what counts as a valid combination.
"""

from dataclasses import dataclass
from typing import Any

from chronomerge.core.exceptions import ConfigurationError

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_LOW_WATER",
    "DEFAULT_FETCH_TIMEOUT",
    "MergeConfig",
]


# =============================================================================
# Refill Tunables
# =============================================================================

# MAX: ceiling on buffered entries per source (bounds memory)
DEFAULT_MAX_DEPTH = 16

# LOW: a source whose buffered count drops below this triggers a refill
DEFAULT_LOW_WATER = 4

# No per-fetch timeout unless explicitly requested
DEFAULT_FETCH_TIMEOUT: float | None = None


@dataclass
class MergeConfig:
    """
    Refill policy for the prefetching merge.

    Attributes:
        max_depth: Maximum buffered entries per source (MAX)
        low_water: Refill trigger (LOW); a source below it causes a refill
        medium: Refill eligibility; every source below it joins the refill
            batch. Defaults to the midpoint of low_water and max_depth.
        fetch_timeout: Optional per-fetch timeout in seconds. This is an
            extension; the merge itself imposes no timeouts by default.
            A timed-out fetch is abandoned rather than interrupted, so a
            source reading in a worker thread may finish that read later.

    Example:
        config = MergeConfig(max_depth=32, low_water=8)
        assert config.medium == 20
    """
    max_depth: int = DEFAULT_MAX_DEPTH
    low_water: int = DEFAULT_LOW_WATER
    medium: int | None = None
    fetch_timeout: float | None = DEFAULT_FETCH_TIMEOUT

    def __post_init__(self) -> None:
        if self.medium is None:
            self.medium = (self.low_water + self.max_depth) // 2
        self.validate()

    def validate(self) -> None:
        """
        Check the tunables against each other.

        Raises:
            ConfigurationError: If any constraint is violated
        """
        if self.low_water < 1:
            raise ConfigurationError(
                f"low_water must be >= 1, got {self.low_water}",
                config_key="low_water",
            )
        if self.max_depth <= self.low_water:
            raise ConfigurationError(
                f"max_depth ({self.max_depth}) must be greater than low_water ({self.low_water})",
                config_key="max_depth",
            )
        if not self.low_water <= self.medium <= self.max_depth:
            raise ConfigurationError(
                f"medium ({self.medium}) must lie between low_water ({self.low_water}) "
                f"and max_depth ({self.max_depth})",
                config_key="medium",
            )
        if self.fetch_timeout is not None and self.fetch_timeout <= 0:
            raise ConfigurationError(
                f"fetch_timeout must be positive, got {self.fetch_timeout}",
                config_key="fetch_timeout",
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for display."""
        return {
            "max_depth": self.max_depth,
            "low_water": self.low_water,
            "medium": self.medium,
            "fetch_timeout": self.fetch_timeout,
        }
