"""Append-only session event log.

The EventLog is the single source of truth for a session. Events are only
ever appended; the one way to replace the whole sequence is through
``replace()``, which accepts only sequences that pass
``check_event_sequence()``.

Structural rules for a restorable sequence:
1. Every event type is known
2. The first event is session.started, and it appears exactly once
3. Timestamps never decrease
4. Nothing follows a terminal event (session.completed, session.abandoned)
5. session.completed directly follows reflection.submitted
6. Every event is legal in the phase the sequence has reached
7. nudge.requested never exceeds the nudge budget
8. reflection.submitted carries readable reflection responses
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from conditioning_studio.domain.errors.event_log import (
    EventValidationError,
    InvalidEventLogError,
)
from conditioning_studio.domain.events.event import SessionEvent
from conditioning_studio.domain.events.event_types import SessionEventType
from conditioning_studio.domain.events.payloads import ReflectionSubmittedPayload
from conditioning_studio.domain.models.phase import Phase, allowed_events, next_phase


def _coerce_event(raw: SessionEvent | Mapping[str, Any], index: int) -> SessionEvent:
    if isinstance(raw, SessionEvent):
        return raw
    try:
        return SessionEvent.from_dict(raw)
    except EventValidationError as exc:
        raise InvalidEventLogError(str(exc), index=index) from exc


def check_event_sequence(
    events: Iterable[SessionEvent | Mapping[str, Any]],
    nudge_budget: int | None = None,
) -> tuple[SessionEvent, ...]:
    """Validate a persisted sequence and return it as SessionEvents.

    The sequence is replayed through the phase matrix, so every event must
    have been legal in the phase it was accepted in. Payloads are not
    re-validated, except for reflection responses.

    Args:
        events: SessionEvents or their to_dict() form, in log order.
        nudge_budget: Nudges the session allows; None skips the budget check.

    Returns:
        The sequence as a tuple of SessionEvents.

    Raises:
        InvalidEventLogError: If the sequence is structurally inconsistent.
    """
    checked: list[SessionEvent] = []
    phase: Phase | None = None
    nudges_used = 0
    for index, raw in enumerate(events):
        event = _coerce_event(raw, index)
        previous = checked[-1] if checked else None

        if previous is None:
            if event.type != SessionEventType.SESSION_STARTED:
                raise InvalidEventLogError(
                    f"first event must be session.started, got {event.type}",
                    index=index,
                )
        else:
            if event.type == SessionEventType.SESSION_STARTED:
                raise InvalidEventLogError("duplicate session.started", index=index)
            if event.timestamp < previous.timestamp:
                raise InvalidEventLogError(
                    f"timestamp {event.timestamp} precedes {previous.timestamp}",
                    index=index,
                )
            if previous.type.is_terminal:
                raise InvalidEventLogError(
                    f"{event.type} follows terminal event {previous.type}",
                    index=index,
                )

        # session.completed is only ever emitted right after a reflection
        if event.type == SessionEventType.SESSION_COMPLETED and (
            previous is None or previous.type != SessionEventType.REFLECTION_SUBMITTED
        ):
            raise InvalidEventLogError(
                "session.completed must directly follow reflection.submitted",
                index=index,
            )

        if event.type not in allowed_events(phase):
            phase_name = phase.value if phase is not None else "not started"
            raise InvalidEventLogError(
                f"{event.type} is not allowed in phase {phase_name}",
                index=index,
            )

        if event.type == SessionEventType.NUDGE_REQUESTED:
            nudges_used += 1
            if nudge_budget is not None and nudges_used > nudge_budget:
                raise InvalidEventLogError(
                    f"nudge {nudges_used} exceeds the budget of {nudge_budget}",
                    index=index,
                )

        if event.type == SessionEventType.REFLECTION_SUBMITTED:
            try:
                ReflectionSubmittedPayload.model_validate(event.to_dict()["data"])
            except ValidationError as exc:
                raise InvalidEventLogError(
                    f"unreadable reflection responses: {exc.error_count()} errors",
                    index=index,
                ) from exc

        phase = next_phase(phase, event.type)
        checked.append(event)
    return tuple(checked)


class EventLog:
    """Ordered, append-only sequence of accepted session events."""

    def __init__(self) -> None:
        self._events: list[SessionEvent] = []

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[SessionEvent]:
        return iter(tuple(self._events))

    @property
    def last(self) -> SessionEvent | None:
        """The most recently appended event, if any."""
        return self._events[-1] if self._events else None

    @property
    def last_timestamp(self) -> int | None:
        """Timestamp of the most recent event, if any."""
        return self._events[-1].timestamp if self._events else None

    def append(self, event: SessionEvent) -> None:
        """Append an accepted event.

        Raises:
            EventValidationError: If the timestamp precedes the last event's.
        """
        last = self.last
        if last is not None and event.timestamp < last.timestamp:
            raise EventValidationError(
                f"timestamp {event.timestamp} precedes last event at {last.timestamp}"
            )
        self._events.append(event)

    def snapshot(self) -> tuple[SessionEvent, ...]:
        """Get an immutable copy of the whole log."""
        return tuple(self._events)

    def prefix(self, length: int) -> tuple[SessionEvent, ...]:
        """Get the first ``length`` events."""
        return tuple(self._events[:length])

    def replace(
        self,
        events: Iterable[SessionEvent | Mapping[str, Any]],
        nudge_budget: int | None = None,
    ) -> None:
        """Replace the whole log with a validated sequence.

        The current log is left untouched if validation fails.

        Args:
            events: SessionEvents or their to_dict() form, in log order.
            nudge_budget: Nudges the session allows; None skips the budget check.

        Raises:
            InvalidEventLogError: If the sequence is structurally inconsistent.
        """
        checked = check_event_sequence(events, nudge_budget)
        self._events = list(checked)
