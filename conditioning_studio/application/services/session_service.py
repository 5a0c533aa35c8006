"""Session aggregate - the public API of the practice session engine.

A Session owns an append-only event log and a subscription registry.
Callers drive it with dispatch(); everything they read back (get_state)
is projected from the log and the injected clock at read time.

Dispatch pipeline (first rejection wins, nothing is appended on reject):
1. Resolve the event type          INVALID_EVENT, INVALID_EVENT_TYPE
2. Lifecycle and phase guard       SESSION_TERMINATED, INVALID_TRANSITION,
                                   INVALID_PHASE
3. Payload validation              INVALID_PAYLOAD, VALIDATION_FAILED
4. Nudge budget                    NUDGE_BUDGET_EXHAUSTED
5. Append (plus session.completed after a valid reflection)
6. Notify listeners

Developer Golden Rules:
1. LOG IS TRUTH - no state is kept beside the event log
2. VALUES, NOT EXCEPTIONS - rejections come back as DispatchFailure
3. INJECTED TIME - every timestamp comes from the session clock
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from uuid6 import uuid7

from conditioning_studio.application.ports.clock import Clock, system_clock
from conditioning_studio.application.services.subscription_registry import (
    Listener,
    SubscriptionRegistry,
    Unsubscribe,
)
from conditioning_studio.config.studio_config import StudioConfig
from conditioning_studio.domain.errors.event_log import InvalidEventLogError
from conditioning_studio.domain.events.event import SessionEvent
from conditioning_studio.domain.events.event_types import SessionEventType
from conditioning_studio.domain.models.dispatch_result import (
    DispatchFailure,
    DispatchResult,
    success,
)
from conditioning_studio.domain.models.event_log import EventLog
from conditioning_studio.domain.models.preset import (
    Preset,
    PresetConfig,
    get_preset_config,
)
from conditioning_studio.domain.models.problem import Problem
from conditioning_studio.domain.models.session_context import SessionContext
from conditioning_studio.domain.models.session_state import SessionState
from conditioning_studio.domain.services.expiry_trigger import due_expiry_event
from conditioning_studio.domain.services.nudge_tracker import NudgeTracker
from conditioning_studio.domain.services.payload_validator import PayloadValidator
from conditioning_studio.domain.services.phase_guard import (
    check_transition,
    resolve_event_type,
)
from conditioning_studio.domain.services.state_projector import project_state

logger = structlog.get_logger(__name__)


class Session:
    """One practice session: event log, projector and listeners.

    Sessions are created with create_session(); constructing one directly
    is meant for tests and for hosts that already hold a SessionContext.

    Attributes:
        context: Problem, preset and resolved config fixed at creation.
    """

    def __init__(self, context: SessionContext, clock: Clock = system_clock) -> None:
        """Initialize an empty, not yet started session.

        Args:
            context: Creation-time problem, preset and config.
            clock: Zero-argument callable returning integer milliseconds.

        Raises:
            TypeError: If clock is not callable or does not return an int.
        """
        if not callable(clock):
            raise TypeError(f"clock must be callable, got {type(clock).__name__}")
        self.context = context
        self._clock = clock
        self._read_clock()
        self._log = EventLog()
        self._registry = SubscriptionRegistry()
        self._validator = PayloadValidator(context)
        self._nudges = NudgeTracker(
            nudge_budget=context.config.nudge_budget,
            coding_duration_ms=context.config.coding_duration_ms,
        )

    def __repr__(self) -> str:
        return (
            f"Session(problem={self.context.problem.id!r}, "
            f"preset={self.context.preset.value!r}, events={len(self._log)})"
        )

    @property
    def problem(self) -> Problem:
        return self.context.problem

    @property
    def preset(self) -> Preset:
        return self.context.preset

    @property
    def config(self) -> PresetConfig:
        return self.context.config

    @property
    def session_id(self) -> str | None:
        """Identifier recorded by session.started, None before start."""
        first = self._log.prefix(1)
        if not first:
            return None
        session_id = first[0].data.get("session_id")
        return session_id if isinstance(session_id, str) else None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_state(self) -> SessionState:
        """Project the current state at the current clock reading."""
        return project_state(self._log, self.context, self._now())

    def get_events(self) -> tuple[SessionEvent, ...]:
        """Get an immutable copy of the event log."""
        return self._log.snapshot()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register a listener called with (event, state) per accepted event.

        Returns:
            A function that removes the listener.
        """
        return self._registry.subscribe(listener)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def dispatch(self, event_type: Any, payload: Any = None) -> DispatchResult:
        """Validate and, if accepted, append an event.

        Args:
            event_type: Event name (e.g. "coding.started") or SessionEventType.
            payload: Event payload mapping; None means empty.

        Returns:
            DispatchSuccess with the appended event, or DispatchFailure.
        """
        resolved = resolve_event_type(event_type)
        if isinstance(resolved, DispatchFailure):
            return self._reject(str(event_type), resolved)
        return self._dispatch(resolved, payload)

    def check_expiry(self) -> DispatchResult | None:
        """Dispatch the active timed phase's expiry event if it is due.

        PREP emits prep.time_expired once (flag only), CODING emits
        coding.silent_started and SILENT emits silent.ended.

        Returns:
            The dispatch result of the expiry event, or None if nothing
            has expired.
        """
        state = self.get_state()
        event_type = due_expiry_event(state)
        if event_type is None:
            return None
        logger.info(
            "phase_expired",
            session_id=state.session_id,
            phase=state.phase.value if state.phase is not None else None,
            event_type=event_type.value,
            over_by_ms=-state.remaining_time_ms,
        )
        return self._dispatch(event_type, None)

    def restore(self, events: Iterable[SessionEvent | Mapping[str, Any]]) -> None:
        """Replace the event log with a persisted sequence.

        The sequence is replayed through the phase matrix and the nudge
        budget; payloads are trusted except that reflection responses must
        still validate.
        Listeners are not notified.

        Args:
            events: SessionEvents or their to_dict() form, in log order.

        Raises:
            InvalidEventLogError: If the sequence is structurally
                inconsistent. The current log is left untouched.
        """
        try:
            self._log.replace(events, nudge_budget=self.config.nudge_budget)
        except InvalidEventLogError as e:
            logger.warning(
                "restore_rejected",
                session_id=self.session_id,
                reason=e.reason,
                index=e.index,
            )
            raise
        logger.info(
            "session_restored",
            session_id=self.session_id,
            event_count=len(self._log),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read_clock(self) -> int:
        """Read the clock, which must return integer milliseconds."""
        reading = self._clock()
        if isinstance(reading, bool) or not isinstance(reading, int):
            raise TypeError(
                f"clock must return integer milliseconds, got {type(reading).__name__}"
            )
        return reading

    def _now(self) -> int:
        """Read the clock, never earlier than the last logged event."""
        reading = self._read_clock()
        last = self._log.last_timestamp
        if last is not None and reading < last:
            return last
        return reading

    def _dispatch(self, event_type: SessionEventType, payload: Any) -> DispatchResult:
        now = self._now()
        state = project_state(self._log, self.context, now)

        rejection = check_transition(state.phase, state.status, event_type)
        if rejection is not None:
            return self._reject(event_type.value, rejection, state)

        data = self._validator.validate(event_type, payload)
        if isinstance(data, DispatchFailure):
            return self._reject(event_type.value, data, state)

        if event_type == SessionEventType.NUDGE_REQUESTED:
            rejection = self._nudges.check(state.phase, state.nudges_used)
            if rejection is not None:
                return self._reject(event_type.value, rejection, state)
            coding_started_at = (
                state.coding_started_at if state.coding_started_at is not None else now
            )
            data.update(self._nudges.grant(coding_started_at, now))
        elif event_type == SessionEventType.SESSION_STARTED:
            data.setdefault("session_id", str(uuid7()))

        event = SessionEvent(type=event_type, timestamp=now, data=data)
        committed_from = len(self._log)
        self._append(event)
        if event_type == SessionEventType.REFLECTION_SUBMITTED:
            self._append(
                SessionEvent(type=SessionEventType.SESSION_COMPLETED, timestamp=now)
            )
        self._notify(committed_from, now)
        return success(event)

    def _append(self, event: SessionEvent) -> None:
        self._log.append(event)
        logger.info(
            "event_appended",
            session_id=self.session_id,
            event_type=event.type.value,
            timestamp=event.timestamp,
            event_count=len(self._log),
        )

    def _notify(self, committed_from: int, now: int) -> None:
        """Notify listeners of every event appended since committed_from."""
        if not len(self._registry):
            return
        for index in range(committed_from, len(self._log)):
            events = self._log.prefix(index + 1)
            state = project_state(events, self.context, now)
            self._registry.notify(events[-1], state, session_id=state.session_id)

    def _reject(
        self,
        event_type: str,
        rejection: DispatchFailure,
        state: SessionState | None = None,
    ) -> DispatchFailure:
        logger.warning(
            "dispatch_rejected",
            session_id=state.session_id if state is not None else self.session_id,
            event_type=event_type,
            code=rejection.code.value,
            reason=rejection.error.message,
        )
        return rejection


def create_session(
    problem: Problem | Mapping[str, Any],
    preset: Preset | str | None = None,
    clock: Clock | None = None,
    *,
    config: PresetConfig | None = None,
    studio_config: StudioConfig | None = None,
) -> Session:
    """Create a new, not yet started session.

    Args:
        problem: The problem under attempt (Problem or its dict form).
        preset: Preset name; defaults to STUDIO_DEFAULT_PRESET (standard).
        clock: Millisecond clock; defaults to the system clock.
        config: Explicit durations and budget overriding the preset's.
        studio_config: Process defaults; read from the environment if None.

    Returns:
        A Session in the not-started state.

    Raises:
        ValueError: If the preset is unknown or the problem is invalid.
        TypeError: If clock is not callable or does not return integer
            milliseconds.

    Example:
        >>> session = create_session(
        ...     {"id": "two-sum", "title": "Two Sum", "description": "..."},
        ...     preset="high_pressure",
        ... )
        >>> session.dispatch("session.started").ok
        True
    """
    if not isinstance(problem, Problem):
        problem = Problem.from_dict(problem)
    if preset is None:
        preset = (studio_config or StudioConfig.from_environment()).default_preset
    resolved_preset = Preset(preset)
    context = SessionContext(
        problem=problem,
        preset=resolved_preset,
        config=config if config is not None else get_preset_config(resolved_preset),
    )
    return Session(context, clock if clock is not None else system_clock)
