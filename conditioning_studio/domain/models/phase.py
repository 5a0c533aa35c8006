"""Session phase and status model.

A session walks a strict, forward-only protocol:
START -> PREP -> CODING -> (SILENT) -> SUMMARY -> REFLECTION -> DONE

SILENT is skipped on early submission (coding.solution_submitted).
Abandonment is orthogonal: it leaves the phase as-is and flips the
status to ABANDONED_EXPLICIT.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

from conditioning_studio.domain.events.event_types import SessionEventType


class Phase(StrEnum):
    """Phase of the guided exercise.

    Phases:
        START: Before session.started (the projected phase is None here)
        PREP: Read the problem, write down invariants
        CODING: Write the solution, nudges available
        SILENT: Enforced no-assistance period at the end of coding
        SUMMARY: Review of the attempt
        REFLECTION: Mandatory self-reflection questionnaire
        DONE: Terminal - session completed
    """

    START = "START"
    PREP = "PREP"
    CODING = "CODING"
    SILENT = "SILENT"
    SUMMARY = "SUMMARY"
    REFLECTION = "REFLECTION"
    DONE = "DONE"

    def is_terminal(self) -> bool:
        """Check if this is the terminal phase."""
        return self == Phase.DONE

    def is_timed(self) -> bool:
        """Check if this phase runs against a configured duration."""
        return self in TIMED_PHASES


class SessionStatus(StrEnum):
    """Lifecycle status of a session, orthogonal to its phase."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED_EXPLICIT = "abandoned_explicit"

    def is_terminal(self) -> bool:
        """Check if no further events may be accepted."""
        return self != SessionStatus.IN_PROGRESS


TIMED_PHASES: Final[frozenset[Phase]] = frozenset(
    {Phase.PREP, Phase.CODING, Phase.SILENT}
)

_AUDIO_EVENTS: Final[frozenset[SessionEventType]] = frozenset(
    {
        SessionEventType.AUDIO_STARTED,
        SessionEventType.AUDIO_STOPPED,
        SessionEventType.AUDIO_PERMISSION_DENIED,
    }
)

# Events that may be dispatched in each phase.
# Abandonment and audio events are allowed everywhere between PREP and REFLECTION.
PHASE_EVENT_MATRIX: Final[dict[Phase, frozenset[SessionEventType]]] = {
    Phase.START: frozenset({SessionEventType.SESSION_STARTED}),
    Phase.PREP: frozenset(
        {
            SessionEventType.PREP_INVARIANTS_CHANGED,
            SessionEventType.PREP_TIME_EXPIRED,
            SessionEventType.CODING_STARTED,
            SessionEventType.SESSION_ABANDONED,
        }
    )
    | _AUDIO_EVENTS,
    Phase.CODING: frozenset(
        {
            SessionEventType.CODING_CODE_CHANGED,
            SessionEventType.NUDGE_REQUESTED,
            SessionEventType.CODING_SILENT_STARTED,
            SessionEventType.CODING_SOLUTION_SUBMITTED,
            SessionEventType.SESSION_ABANDONED,
        }
    )
    | _AUDIO_EVENTS,
    Phase.SILENT: frozenset(
        {
            SessionEventType.CODING_CODE_CHANGED,
            SessionEventType.SILENT_ENDED,
            SessionEventType.SESSION_ABANDONED,
        }
    )
    | _AUDIO_EVENTS,
    Phase.SUMMARY: frozenset(
        {SessionEventType.SUMMARY_CONTINUED, SessionEventType.SESSION_ABANDONED}
    )
    | _AUDIO_EVENTS,
    Phase.REFLECTION: frozenset(
        {
            SessionEventType.REFLECTION_SUBMITTED,
            SessionEventType.SESSION_COMPLETED,
            SessionEventType.SESSION_ABANDONED,
        }
    )
    | _AUDIO_EVENTS,
    Phase.DONE: frozenset(),
}

# Events that move the session to a new phase. Everything else is phase-neutral.
EVENT_TARGET_PHASE: Final[dict[SessionEventType, Phase]] = {
    SessionEventType.SESSION_STARTED: Phase.PREP,
    SessionEventType.CODING_STARTED: Phase.CODING,
    SessionEventType.CODING_SILENT_STARTED: Phase.SILENT,
    SessionEventType.CODING_SOLUTION_SUBMITTED: Phase.SUMMARY,
    SessionEventType.SILENT_ENDED: Phase.SUMMARY,
    SessionEventType.SUMMARY_CONTINUED: Phase.REFLECTION,
    SessionEventType.SESSION_COMPLETED: Phase.DONE,
}


def allowed_events(phase: Phase | None) -> frozenset[SessionEventType]:
    """Get the events that may be dispatched in a phase.

    Args:
        phase: Current phase, or None before session.started.

    Returns:
        Set of event types legal in that phase.
    """
    return PHASE_EVENT_MATRIX[phase or Phase.START]


def next_phase(phase: Phase | None, event_type: SessionEventType) -> Phase | None:
    """Get the phase a session is in after accepting an event.

    Args:
        phase: Phase before the event.
        event_type: The accepted event.

    Returns:
        The resulting phase (unchanged for phase-neutral events).
    """
    return EVENT_TARGET_PHASE.get(event_type, phase)
