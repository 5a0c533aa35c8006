"""Session event entity.

This module defines the SessionEvent entity stored in a session's event
log. Events are immutable, append-only records of accepted user and
system actions; the whole session state is derived from them.

Developer Golden Rules:
1. Events are frozen - the payload is stored as a MappingProxyType
2. Timestamps are integer milliseconds from the injected clock
3. to_dict()/from_dict() are the only persistence format
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from conditioning_studio.domain.errors.event_log import EventValidationError
from conditioning_studio.domain.events.event_types import SessionEventType


def _freeze(value: Any) -> Any:
    """Recursively convert mappings and lists into read-only equivalents."""
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    """Recursively convert frozen payload values back into plain containers."""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True, eq=True)
class SessionEvent:
    """A single accepted session event - append-only, immutable.

    Attributes:
        type: The event type.
        timestamp: Clock reading (milliseconds) when the event was accepted.
        data: Event payload, frozen on construction.

    Example:
        >>> event = SessionEvent(
        ...     type=SessionEventType.CODING_CODE_CHANGED,
        ...     timestamp=61_000,
        ...     data={"code": "def two_sum(nums, target): ..."},
        ... )
        >>> event.data["code"]
        'def two_sum(nums, target): ...'
    """

    type: SessionEventType
    timestamp: int
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate fields and freeze the payload.

        Raises:
            EventValidationError: If any field fails validation.
        """
        self._validate_type()
        self._validate_timestamp()
        self._freeze_data()

    def _validate_type(self) -> None:
        """Coerce and validate the event type."""
        if isinstance(self.type, SessionEventType):
            return
        parsed = SessionEventType.parse(self.type) if isinstance(self.type, str) else None
        if parsed is None:
            raise EventValidationError(f"unknown event type: {self.type!r}")
        object.__setattr__(self, "type", parsed)

    def _validate_timestamp(self) -> None:
        """Validate timestamp is a non-negative integer."""
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            raise EventValidationError(
                f"timestamp must be an integer, got {type(self.timestamp).__name__}"
            )
        if self.timestamp < 0:
            raise EventValidationError(
                f"timestamp must be non-negative, got {self.timestamp}"
            )

    def _freeze_data(self) -> None:
        """Validate and freeze the payload mapping."""
        if not isinstance(self.data, Mapping):
            raise EventValidationError(
                f"data must be a mapping, got {type(self.data).__name__}"
            )
        object.__setattr__(self, "data", _freeze(self.data))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary.

        Returns:
            Dictionary with type, timestamp and a plain-dict data payload.
        """
        return {
            "type": self.type.value,
            "timestamp": self.timestamp,
            "data": _thaw(self.data),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> SessionEvent:
        """Rebuild an event from its to_dict() form.

        Args:
            raw: Mapping with "type", "timestamp" and optional "data".

        Returns:
            The reconstructed SessionEvent.

        Raises:
            EventValidationError: If required keys are missing or malformed.
        """
        if not isinstance(raw, Mapping):
            raise EventValidationError(
                f"event must be a mapping, got {type(raw).__name__}"
            )
        missing = [key for key in ("type", "timestamp") if key not in raw]
        if missing:
            raise EventValidationError(f"event is missing keys: {missing}")
        data = raw.get("data")
        return cls(
            type=raw["type"],
            timestamp=raw["timestamp"],
            data={} if data is None else data,
        )
