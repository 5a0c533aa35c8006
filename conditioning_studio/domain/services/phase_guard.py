"""Phase guard - decides whether an event may be dispatched right now.

Checks run in a fixed order and the first failing check wins:

1. INVALID_EVENT        - the event type is not a string
2. INVALID_EVENT_TYPE   - the name is not in the event vocabulary
3. SESSION_TERMINATED   - the session is completed or abandoned
4. INVALID_TRANSITION   - session.completed is engine-internal
5. INVALID_PHASE        - the event is not legal in the current phase

Developer Golden Rules:
1. PURE - no clock, no log access, just (phase, status, event type)
2. RETURN, DON'T RAISE - rejections are DispatchFailure values
"""

from __future__ import annotations

from typing import Any

from conditioning_studio.domain.events.event_types import (
    INTERNAL_EVENT_TYPES,
    SessionEventType,
)
from conditioning_studio.domain.models.dispatch_result import (
    DispatchErrorCode,
    DispatchFailure,
    failure,
)
from conditioning_studio.domain.models.phase import Phase, SessionStatus, allowed_events


def resolve_event_type(raw: Any) -> SessionEventType | DispatchFailure:
    """Turn a caller-supplied event name into a SessionEventType.

    Args:
        raw: Whatever the caller passed as the event type.

    Returns:
        The event type, or a DispatchFailure with INVALID_EVENT or
        INVALID_EVENT_TYPE.
    """
    if isinstance(raw, SessionEventType):
        return raw
    if not isinstance(raw, str):
        return failure(
            DispatchErrorCode.INVALID_EVENT,
            f"event type must be a string, got {type(raw).__name__}",
        )
    event_type = SessionEventType.parse(raw)
    if event_type is None:
        return failure(DispatchErrorCode.INVALID_EVENT_TYPE, f"unknown event type: {raw!r}")
    return event_type


def check_transition(
    phase: Phase | None,
    status: SessionStatus,
    event_type: SessionEventType,
    *,
    internal: bool = False,
) -> DispatchFailure | None:
    """Check an event against the session lifecycle and phase matrix.

    Args:
        phase: Current phase (None before session.started).
        status: Current lifecycle status.
        event_type: The event being dispatched.
        internal: True when the engine itself emits the event.

    Returns:
        None if the event is allowed, otherwise the rejection.
    """
    if status.is_terminal() or (phase is not None and phase.is_terminal()):
        return failure(
            DispatchErrorCode.SESSION_TERMINATED,
            f"session is {status.value}; no further events are accepted",
        )
    if event_type in INTERNAL_EVENT_TYPES and not internal:
        return failure(
            DispatchErrorCode.INVALID_TRANSITION,
            f"{event_type} is emitted by the session itself and cannot be dispatched",
        )
    if event_type not in allowed_events(phase):
        phase_name = phase.value if phase is not None else "not started"
        return failure(
            DispatchErrorCode.INVALID_PHASE,
            f"{event_type} is not allowed in phase {phase_name}",
        )
    return None
