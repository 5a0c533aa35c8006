"""Expiry trigger - which event a timed phase emits when its time is up.

| phase  | expiry event           | effect                          |
| PREP   | prep.time_expired      | flag only; host sends coding.started |
| CODING | coding.silent_started  | CODING -> SILENT                |
| SILENT | silent.ended           | SILENT -> SUMMARY               |

Expiry is cooperative: nothing here schedules work. The host calls
Session.check_expiry() (e.g. from its own ticker) and the session asks
this module whether an expiry event is due at the current clock reading.
"""

from __future__ import annotations

from typing import Final

from conditioning_studio.domain.events.event_types import SessionEventType
from conditioning_studio.domain.models.phase import Phase
from conditioning_studio.domain.models.session_state import SessionState

EXPIRY_EVENTS: Final[dict[Phase, SessionEventType]] = {
    Phase.PREP: SessionEventType.PREP_TIME_EXPIRED,
    Phase.CODING: SessionEventType.CODING_SILENT_STARTED,
    Phase.SILENT: SessionEventType.SILENT_ENDED,
}


def due_expiry_event(state: SessionState) -> SessionEventType | None:
    """Get the expiry event due for a projected state, if any.

    The state's remaining_time_ms was projected at the current clock
    reading, so the active phase has expired once it is <= 0.

    Args:
        state: State projected at the current clock reading.

    Returns:
        The expiry event to dispatch, or None if nothing is due.
    """
    if state.is_terminal or state.phase is None:
        return None
    event_type = EXPIRY_EVENTS.get(state.phase)
    if event_type is None or state.remaining_time_ms > 0:
        return None
    if event_type == SessionEventType.PREP_TIME_EXPIRED and state.metrics.prep_time_expired:
        return None
    return event_type
