"""Domain errors for Conditioning Studio.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from StudioError.
"""

from conditioning_studio.domain.errors.event_log import (
    EventValidationError,
    InvalidEventLogError,
)

__all__: list[str] = ["EventValidationError", "InvalidEventLogError"]
