"""Studio configuration with environment variable overrides.

Environment Variables:
- STUDIO_DEFAULT_PRESET: Preset used when create_session() is not given
  one (default: standard; one of standard, high_pressure, no_assistance)
- STUDIO_LOG_ENVIRONMENT: Log renderer selection passed to
  configure_structlog() (default: development; development or production)

Invalid values fall back to the defaults rather than failing startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from conditioning_studio.domain.models.preset import Preset

DEFAULT_PRESET: Final[Preset] = Preset.STANDARD

LOG_ENVIRONMENTS: Final[frozenset[str]] = frozenset({"development", "production"})

DEFAULT_LOG_ENVIRONMENT: Final[str] = "development"


def _get_str_env(key: str, default: str, allowed: frozenset[str]) -> str:
    """Get a string environment variable restricted to allowed values.

    Args:
        key: Environment variable name.
        default: Default value if not set or not allowed.
        allowed: Accepted values (compared case-insensitively).

    Returns:
        The normalized value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    return normalized if normalized in allowed else default


@dataclass(frozen=True)
class StudioConfig:
    """Process-wide defaults for the session engine.

    Attributes:
        default_preset: Preset applied when create_session() gets none.
        log_environment: "development" (console) or "production" (JSON).
    """

    default_preset: Preset = DEFAULT_PRESET
    log_environment: str = DEFAULT_LOG_ENVIRONMENT

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not isinstance(self.default_preset, Preset):
            raise ValueError(
                f"default_preset must be a Preset, got {self.default_preset!r}"
            )
        if self.log_environment not in LOG_ENVIRONMENTS:
            raise ValueError(
                f"log_environment must be one of {sorted(LOG_ENVIRONMENTS)}, "
                f"got {self.log_environment!r}"
            )

    @classmethod
    def from_environment(cls) -> StudioConfig:
        """Create config from environment variables with defaults.

        Returns:
            StudioConfig with values from environment or defaults.
        """
        preset = _get_str_env(
            "STUDIO_DEFAULT_PRESET",
            DEFAULT_PRESET.value,
            frozenset(member.value for member in Preset),
        )
        log_environment = _get_str_env(
            "STUDIO_LOG_ENVIRONMENT",
            DEFAULT_LOG_ENVIRONMENT,
            LOG_ENVIRONMENTS,
        )
        return cls(default_preset=Preset(preset), log_environment=log_environment)


# Default configuration instance
DEFAULT_STUDIO_CONFIG = StudioConfig()

# Configuration for tests: pinned, independent of the environment
TEST_STUDIO_CONFIG = StudioConfig(
    default_preset=Preset.STANDARD,
    log_environment="development",
)
