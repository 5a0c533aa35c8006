"""Session events for Conditioning Studio.

Payload schemas live in conditioning_studio.domain.events.payloads and are
imported from there directly.
"""

from conditioning_studio.domain.events.event import SessionEvent
from conditioning_studio.domain.events.event_types import (
    INTERNAL_EVENT_TYPES,
    TERMINAL_EVENT_TYPES,
    SessionEventType,
)

__all__: list[str] = [
    "INTERNAL_EVENT_TYPES",
    "TERMINAL_EVENT_TYPES",
    "SessionEvent",
    "SessionEventType",
]
