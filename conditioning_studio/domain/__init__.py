"""
Domain layer - Pure session rules for Conditioning Studio.

This layer contains:
- Session events and their payload schemas
- Value objects (phases, presets, problems, dispatch results)
- Domain services (phase guard, payload validator, nudge tracker,
  expiry trigger, state projector)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or config.
"""

from conditioning_studio.domain.errors import EventValidationError, InvalidEventLogError
from conditioning_studio.domain.exceptions import StudioError

__all__: list[str] = [
    "StudioError",
    "EventValidationError",
    "InvalidEventLogError",
]
