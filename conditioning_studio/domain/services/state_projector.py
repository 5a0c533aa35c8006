"""State projector - folds the event log into a SessionState.

project_state() is a pure function of (events, context, now). It is run
on every get_state() call and whenever listeners are notified, so the
live fields (remaining_time_ms, phase time used) always reflect the
clock reading passed in.

Timing rules:
- A phase's time used runs from the event that entered it to the event
  that left it. While the phase is active it runs to ``now``; if the
  session was abandoned inside it, to the abandon timestamp.
- total_duration_ms runs from session.started to the last event.
- An overrun is recorded only for a timed phase that has been left, when
  its time used exceeded the configured duration.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from conditioning_studio.domain.events.event import SessionEvent
from conditioning_studio.domain.events.event_types import SessionEventType
from conditioning_studio.domain.events.payloads import ReflectionResponses
from conditioning_studio.domain.models.phase import (
    TIMED_PHASES,
    Phase,
    SessionStatus,
    next_phase,
)
from conditioning_studio.domain.models.session_context import SessionContext
from conditioning_studio.domain.models.session_state import (
    NudgeTiming,
    PhaseOverrun,
    SessionMetrics,
    SessionState,
)
from conditioning_studio.domain.services.nudge_tracker import (
    NudgeTracker,
    classify_nudge_timing,
)


@dataclass
class _Fold:
    """Mutable accumulator used while walking the log."""

    session_id: str | None = None
    phase: Phase | None = None
    status: SessionStatus = SessionStatus.IN_PROGRESS
    invariants: str = ""
    code: str = ""
    nudge_timings: list[NudgeTiming] = field(default_factory=list)
    is_recording: bool = False
    reflection: ReflectionResponses | None = None
    prep_time_expired: bool = False
    code_changes: int = 0
    code_changes_in_silent: int = 0
    entered_at: dict[Phase, int] = field(default_factory=dict)
    left_at: dict[Phase, int] = field(default_factory=dict)
    abandoned_at: int | None = None
    last_timestamp: int | None = None
    event_count: int = 0


def _nudge_timing(fold: _Fold, event: SessionEvent, context: SessionContext) -> NudgeTiming:
    recorded = event.data.get("timing")
    if recorded in tuple(timing.value for timing in NudgeTiming):
        return NudgeTiming(recorded)
    coding_started_at = fold.entered_at.get(Phase.CODING, event.timestamp)
    return classify_nudge_timing(
        event.timestamp - coding_started_at, context.config.coding_duration_ms
    )


def _apply(fold: _Fold, event: SessionEvent, context: SessionContext) -> None:
    data = event.data
    event_type = event.type

    if event_type == SessionEventType.SESSION_STARTED:
        fold.session_id = data.get("session_id")
    elif event_type == SessionEventType.PREP_INVARIANTS_CHANGED:
        fold.invariants = data.get("invariants", fold.invariants)
    elif event_type == SessionEventType.PREP_TIME_EXPIRED:
        fold.prep_time_expired = True
    elif event_type == SessionEventType.CODING_CODE_CHANGED:
        fold.code = data.get("code", fold.code)
        fold.code_changes += 1
        if fold.phase == Phase.SILENT:
            fold.code_changes_in_silent += 1
    elif event_type == SessionEventType.NUDGE_REQUESTED:
        fold.nudge_timings.append(_nudge_timing(fold, event, context))
    elif event_type == SessionEventType.REFLECTION_SUBMITTED:
        fold.reflection = ReflectionResponses.model_validate(dict(data["responses"]))
    elif event_type == SessionEventType.SESSION_ABANDONED:
        fold.status = SessionStatus.ABANDONED_EXPLICIT
        fold.abandoned_at = event.timestamp
    elif event_type == SessionEventType.SESSION_COMPLETED:
        fold.status = SessionStatus.COMPLETED
    elif event_type == SessionEventType.AUDIO_STARTED:
        fold.is_recording = True
    elif event_type in (
        SessionEventType.AUDIO_STOPPED,
        SessionEventType.AUDIO_PERMISSION_DENIED,
    ):
        fold.is_recording = False

    target = next_phase(fold.phase, event_type)
    if target != fold.phase:
        if fold.phase is not None:
            fold.left_at[fold.phase] = event.timestamp
        if target is not None:
            fold.entered_at[target] = event.timestamp
        fold.phase = target

    fold.last_timestamp = event.timestamp
    fold.event_count += 1


def _time_used(fold: _Fold, phase: Phase, now: int) -> int | None:
    entered = fold.entered_at.get(phase)
    if entered is None:
        return None
    end = fold.left_at.get(phase)
    if end is None:
        end = fold.abandoned_at if fold.abandoned_at is not None else now
    return max(end - entered, 0)


def _remaining_time(fold: _Fold, context: SessionContext, now: int) -> int:
    if fold.phase is None:
        return context.config.prep_duration_ms
    if fold.phase not in TIMED_PHASES:
        return 0
    used = _time_used(fold, fold.phase, now) or 0
    return context.duration_for(fold.phase) - used


def _overruns(fold: _Fold, context: SessionContext, now: int) -> tuple[PhaseOverrun, ...]:
    overruns = []
    for phase in (Phase.PREP, Phase.CODING, Phase.SILENT):
        if phase not in fold.left_at:
            continue
        used = _time_used(fold, phase, now) or 0
        over_by = used - context.duration_for(phase)
        if over_by > 0:
            overruns.append(PhaseOverrun(phase=phase, over_by_ms=over_by))
    return tuple(overruns)


def project_state(
    events: Iterable[SessionEvent],
    context: SessionContext,
    now: int,
) -> SessionState:
    """Fold an event log into a read-only SessionState.

    Args:
        events: The session's events in log order.
        context: Creation-time problem, preset and config.
        now: Current clock reading in milliseconds.

    Returns:
        The projected SessionState.
    """
    fold = _Fold()
    for event in events:
        _apply(fold, event, context)

    config = context.config
    nudges_used = len(fold.nudge_timings)
    nudges_remaining = NudgeTracker(
        nudge_budget=config.nudge_budget,
        coding_duration_ms=config.coding_duration_ms,
    ).remaining(nudges_used)
    started_at = fold.entered_at.get(Phase.PREP)

    metrics = SessionMetrics(
        prep_time_used_ms=_time_used(fold, Phase.PREP, now),
        coding_time_used_ms=_time_used(fold, Phase.CODING, now),
        silent_time_used_ms=_time_used(fold, Phase.SILENT, now),
        total_duration_ms=(
            fold.last_timestamp - started_at
            if started_at is not None and fold.last_timestamp is not None
            else None
        ),
        invariants_empty=not fold.invariants.strip(),
        prep_time_expired=fold.prep_time_expired,
        all_nudges_used=nudges_used >= config.nudge_budget,
        code_changed_in_silent=fold.code_changes_in_silent > 0,
        nudge_timings=tuple(fold.nudge_timings),
        phase_overruns=_overruns(fold, context, now),
        code_changes=fold.code_changes,
        code_changes_in_silent=fold.code_changes_in_silent,
    )

    in_progress = fold.status == SessionStatus.IN_PROGRESS
    return SessionState(
        session_id=fold.session_id,
        phase=fold.phase,
        status=fold.status,
        problem=context.problem,
        preset=context.preset,
        config=config,
        invariants=fold.invariants,
        code=fold.code,
        nudges_used=nudges_used,
        nudges_remaining=nudges_remaining,
        nudges_allowed=in_progress and fold.phase == Phase.CODING and nudges_remaining > 0,
        is_recording=fold.is_recording,
        remaining_time_ms=_remaining_time(fold, context, now),
        reflection=fold.reflection,
        started_at=started_at,
        prep_started_at=fold.entered_at.get(Phase.PREP),
        coding_started_at=fold.entered_at.get(Phase.CODING),
        silent_started_at=fold.entered_at.get(Phase.SILENT),
        summary_started_at=fold.entered_at.get(Phase.SUMMARY),
        reflection_started_at=fold.entered_at.get(Phase.REFLECTION),
        completed_at=fold.entered_at.get(Phase.DONE),
        abandoned_at=fold.abandoned_at,
        event_count=fold.event_count,
        metrics=metrics,
    )
