"""Event log integrity errors.

These errors are raised when a SessionEvent cannot be built from the
supplied fields or when a persisted event sequence handed to
Session.restore() is structurally inconsistent.
"""

from __future__ import annotations

from conditioning_studio.domain.exceptions import StudioError


class EventValidationError(StudioError):
    """Raised when a SessionEvent is constructed with malformed fields.

    Example:
        raise EventValidationError("timestamp must be a non-negative integer, got -5")
    """

    pass


class InvalidEventLogError(StudioError):
    """Raised when an event sequence cannot be restored.

    The session's current log is left untouched when this is raised.

    Attributes:
        index: Position of the offending event in the sequence (None when
            the problem is not tied to one event).
        reason: Short description of the inconsistency.
    """

    def __init__(self, reason: str, index: int | None = None) -> None:
        """Initialize invalid event log error.

        Args:
            reason: Why the sequence was rejected.
            index: Position of the offending event, if any.
        """
        self.reason = reason
        self.index = index
        location = f" at index {index}" if index is not None else ""
        super().__init__(f"Event log rejected{location}: {reason}")
