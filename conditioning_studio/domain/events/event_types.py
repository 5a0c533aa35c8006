"""Session event type vocabulary.

Every event the engine accepts or records is named here. Dispatching a
name outside this vocabulary is rejected with INVALID_EVENT_TYPE.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class SessionEventType(StrEnum):
    """Names of all session events.

    Members are strings and compare equal to their dotted wire names,
    so ``SessionEventType.CODING_STARTED == "coding.started"``.
    """

    SESSION_STARTED = "session.started"
    PREP_INVARIANTS_CHANGED = "prep.invariants_changed"
    PREP_TIME_EXPIRED = "prep.time_expired"
    CODING_STARTED = "coding.started"
    CODING_CODE_CHANGED = "coding.code_changed"
    NUDGE_REQUESTED = "nudge.requested"
    CODING_SILENT_STARTED = "coding.silent_started"
    CODING_SOLUTION_SUBMITTED = "coding.solution_submitted"
    SILENT_ENDED = "silent.ended"
    SUMMARY_CONTINUED = "summary.continued"
    REFLECTION_SUBMITTED = "reflection.submitted"
    SESSION_COMPLETED = "session.completed"
    SESSION_ABANDONED = "session.abandoned"
    AUDIO_STARTED = "audio.started"
    AUDIO_STOPPED = "audio.stopped"
    AUDIO_PERMISSION_DENIED = "audio.permission_denied"

    @property
    def is_terminal(self) -> bool:
        """Check if accepting this event ends the session."""
        return self in TERMINAL_EVENT_TYPES

    @classmethod
    def parse(cls, name: str) -> SessionEventType | None:
        """Look up an event type by its wire name.

        Args:
            name: Dotted event name, e.g. "coding.started".

        Returns:
            The matching SessionEventType, or None if the name is unknown.
        """
        try:
            return cls(name)
        except ValueError:
            return None


TERMINAL_EVENT_TYPES: Final[frozenset[SessionEventType]] = frozenset(
    {SessionEventType.SESSION_COMPLETED, SessionEventType.SESSION_ABANDONED}
)

# Only emitted by the engine itself, right after a valid reflection.
INTERNAL_EVENT_TYPES: Final[frozenset[SessionEventType]] = frozenset(
    {SessionEventType.SESSION_COMPLETED}
)
