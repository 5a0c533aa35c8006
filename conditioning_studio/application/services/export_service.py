"""Session export - the portable bundle written when a session is exported.

The bundle holds export metadata, the full event log and the reflection
responses, plus the final code and invariants and a Markdown README that
can be pasted into a review tool. Everything in SessionExport.to_dict()
is JSON-serializable.

Audio and archive packing are the host's concern; the bundle only
records whether the session was recorded.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Final

import structlog

from conditioning_studio.application.services.session_service import Session
from conditioning_studio.domain.events.event import SessionEvent
from conditioning_studio.domain.events.event_types import SessionEventType
from conditioning_studio.domain.models.session_state import SessionState

logger = structlog.get_logger(__name__)

EXPORT_FORMAT_VERSION: Final[int] = 1

_REFLECTION_QUESTIONS: Final[tuple[tuple[str, str], ...]] = (
    ("clear_approach", "Did you have a clear approach before coding?"),
    ("prolonged_stall", "Did you experience any prolonged stalls?"),
    ("recovered_from_stall", "Did you recover from stalls effectively?"),
    ("time_pressure", "How did you handle time pressure?"),
    ("would_change_approach", "Would you change your approach?"),
)


def format_timestamp(timestamp_ms: int | None) -> str | None:
    """Render a millisecond timestamp as an ISO 8601 UTC string."""
    if timestamp_ms is None:
        return None
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()


@dataclass(frozen=True)
class SessionExport:
    """Export bundle of one session.

    Attributes:
        exported_at: Millisecond timestamp of the export.
        state: State projected at export time.
        events: The full event log.
    """

    exported_at: int
    state: SessionState
    events: tuple[SessionEvent, ...]

    @property
    def audio_recorded(self) -> bool:
        """Check if recording was ever started during the session."""
        return any(event.type == SessionEventType.AUDIO_STARTED for event in self.events)

    def metadata(self) -> dict[str, Any]:
        """Build the metadata block of the bundle."""
        state = self.state
        return {
            "version": EXPORT_FORMAT_VERSION,
            "exported_at": format_timestamp(self.exported_at),
            "session_id": state.session_id,
            "problem": state.problem.to_dict(),
            "preset": state.preset.value,
            "config": state.config.to_dict(),
            "status": state.status.value,
            "timing": {
                "created_at": format_timestamp(state.started_at),
                "completed_at": format_timestamp(state.completed_at),
                "abandoned_at": format_timestamp(state.abandoned_at),
            },
            "audio_recorded": self.audio_recorded,
            "event_count": len(self.events),
        }

    def render_readme(self) -> str:
        """Render a Markdown summary of the attempt for review."""
        state = self.state
        lines = [
            f"# Interview Practice Session: {state.problem.title or state.problem.id}",
            "",
            f"**Preset:** {state.preset.value}",
            f"**Status:** {state.status.value}",
            "",
            "## Problem Description",
            "",
            state.problem.description,
            "",
            "## My Approach / Invariants",
            "",
            state.invariants or "_No invariants were written during the prep phase._",
            "",
            "## My Code",
            "",
            "```python",
            state.code or "# No code was written",
            "```",
        ]
        if state.reflection is not None:
            answers = state.reflection.model_dump(mode="json")
            lines += ["", "## Self-Reflection"]
            for field_name, question in _REFLECTION_QUESTIONS:
                lines += ["", f"**{question}**", answers[field_name]]
        return "\n".join(lines) + "\n"

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-serializable export bundle."""
        reflection = self.state.reflection
        return {
            "metadata": self.metadata(),
            "events": [event.to_dict() for event in self.events],
            "reflection": (
                reflection.model_dump(mode="json") if reflection is not None else None
            ),
            "code": self.state.code,
            "invariants": self.state.invariants,
            "metrics": self.state.metrics.to_dict(),
        }


def build_session_export(session: Session, exported_at: int) -> SessionExport:
    """Build the export bundle of a session.

    Args:
        session: The session to export.
        exported_at: Millisecond timestamp recorded as the export time.

    Returns:
        The SessionExport.
    """
    state = session.get_state()
    events = session.get_events()
    logger.info(
        "session_exported",
        session_id=state.session_id,
        status=state.status.value,
        event_count=len(events),
    )
    return SessionExport(exported_at=exported_at, state=state, events=events)
