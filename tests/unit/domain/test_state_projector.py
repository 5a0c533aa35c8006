"""Unit tests for the state projector."""

from __future__ import annotations

from typing import Any

from conditioning_studio.domain.events.event import SessionEvent
from conditioning_studio.domain.models.phase import Phase, SessionStatus
from conditioning_studio.domain.models.preset import Preset, PresetConfig
from conditioning_studio.domain.models.problem import Problem
from conditioning_studio.domain.models.session_context import SessionContext
from conditioning_studio.domain.models.session_state import NudgeTiming, PhaseOverrun
from conditioning_studio.domain.services.state_projector import project_state

CONTEXT = SessionContext(
    problem=Problem(id="two-sum", title="Two Sum", description=""),
    preset=Preset.STANDARD,
    config=PresetConfig(
        prep_duration_ms=1_000,
        coding_duration_ms=9_000,
        silent_duration_ms=500,
        nudge_budget=2,
    ),
)

REFLECTION = {
    "responses": {
        "clear_approach": "yes",
        "prolonged_stall": "yes",
        "recovered_from_stall": "partially",
        "time_pressure": "manageable",
        "would_change_approach": "no",
    }
}


def _events(*steps: tuple[str, int] | tuple[str, int, dict[str, Any]]) -> list[SessionEvent]:
    events = []
    for step in steps:
        data = step[2] if len(step) == 3 else {}
        events.append(SessionEvent(type=step[0], timestamp=step[1], data=data))
    return events


class TestInitialProjection:
    """Tests for a session that has not started."""

    def test_empty_log(self) -> None:
        """Before session.started the phase is None and timers are full."""
        state = project_state([], CONTEXT, now=123)
        assert state.phase is None
        assert state.status == SessionStatus.IN_PROGRESS
        assert state.session_id is None
        assert state.remaining_time_ms == CONTEXT.config.prep_duration_ms
        assert state.nudges_used == 0
        assert state.nudges_remaining == 2
        assert not state.nudges_allowed
        assert state.metrics.total_duration_ms is None
        assert state.metrics.prep_time_used_ms is None
        assert state.event_count == 0


class TestPhaseAndContent:
    """Tests for phase, text and recording fields."""

    def test_started_session(self) -> None:
        """session.started records the id and enters PREP."""
        state = project_state(
            _events(("session.started", 100, {"session_id": "abc"})), CONTEXT, now=400
        )
        assert state.session_id == "abc"
        assert state.phase == Phase.PREP
        assert state.started_at == 100
        assert state.remaining_time_ms == 700

    def test_latest_invariants_and_code_win(self) -> None:
        """Text fields hold the most recent values."""
        state = project_state(
            _events(
                ("session.started", 0),
                ("prep.invariants_changed", 1, {"invariants": "first"}),
                ("prep.invariants_changed", 2, {"invariants": "second"}),
                ("coding.started", 3),
                ("coding.code_changed", 4, {"code": "a"}),
                ("coding.code_changed", 5, {"code": "b"}),
            ),
            CONTEXT,
            now=6,
        )
        assert state.invariants == "second"
        assert state.code == "b"
        assert state.metrics.code_changes == 2
        assert not state.metrics.invariants_empty

    def test_whitespace_invariants_are_empty(self) -> None:
        """invariants_empty ignores whitespace."""
        state = project_state(
            _events(
                ("session.started", 0),
                ("prep.invariants_changed", 1, {"invariants": "  \n"}),
            ),
            CONTEXT,
            now=2,
        )
        assert state.metrics.invariants_empty

    def test_recording_follows_audio_events(self) -> None:
        """is_recording toggles with audio.started/stopped."""
        started = _events(("session.started", 0), ("audio.started", 1))
        assert project_state(started, CONTEXT, now=2).is_recording
        stopped = started + _events(("audio.stopped", 2))
        assert not project_state(stopped, CONTEXT, now=3).is_recording
        denied = started + _events(("audio.permission_denied", 2))
        assert not project_state(denied, CONTEXT, now=3).is_recording

    def test_completed_session(self) -> None:
        """session.completed moves to DONE with status completed."""
        state = project_state(
            _events(
                ("session.started", 0),
                ("coding.started", 10),
                ("coding.solution_submitted", 20),
                ("summary.continued", 30),
                ("reflection.submitted", 40, REFLECTION),
                ("session.completed", 40),
            ),
            CONTEXT,
            now=99,
        )
        assert state.phase == Phase.DONE
        assert state.status == SessionStatus.COMPLETED
        assert state.is_terminal
        assert state.completed_at == 40
        assert state.reflection is not None
        assert state.reflection.recovered_from_stall == "partially"
        assert state.remaining_time_ms == 0
        assert state.metrics.silent_time_used_ms is None
        assert state.metrics.total_duration_ms == 40

    def test_abandoned_session_keeps_phase(self) -> None:
        """session.abandoned changes status, not phase."""
        state = project_state(
            _events(("session.started", 0), ("coding.started", 10), ("session.abandoned", 50)),
            CONTEXT,
            now=5_000,
        )
        assert state.phase == Phase.CODING
        assert state.status == SessionStatus.ABANDONED_EXPLICIT
        assert state.abandoned_at == 50
        assert state.metrics.coding_time_used_ms == 40
        assert state.remaining_time_ms == 9_000 - 40
        assert not state.nudges_allowed


class TestTimingMetrics:
    """Tests for time used, remaining time and overruns."""

    def test_active_phase_runs_to_now(self) -> None:
        """The active phase's time used is measured against now."""
        state = project_state(
            _events(("session.started", 0), ("coding.started", 1_000)), CONTEXT, now=4_000
        )
        assert state.metrics.prep_time_used_ms == 1_000
        assert state.metrics.coding_time_used_ms == 3_000
        assert state.remaining_time_ms == 6_000

    def test_remaining_time_goes_negative_on_overrun(self) -> None:
        """remaining_time_ms is negative once the phase overruns."""
        state = project_state(_events(("session.started", 0)), CONTEXT, now=1_250)
        assert state.remaining_time_ms == -250

    def test_overruns_recorded_after_transition(self) -> None:
        """Only phases that have been left report overruns."""
        state = project_state(
            _events(
                ("session.started", 0),
                ("coding.started", 1_200),
                ("coding.silent_started", 10_200),
                ("silent.ended", 10_900),
            ),
            CONTEXT,
            now=20_000,
        )
        assert state.metrics.phase_overruns == (
            PhaseOverrun(phase=Phase.PREP, over_by_ms=200),
            PhaseOverrun(phase=Phase.SILENT, over_by_ms=200),
        )
        assert state.metrics.silent_time_used_ms == 700
        assert state.summary_started_at == 10_900

    def test_active_overrun_not_recorded(self) -> None:
        """A phase still running is not yet an overrun."""
        state = project_state(_events(("session.started", 0)), CONTEXT, now=50_000)
        assert state.metrics.phase_overruns == ()

    def test_total_duration_to_last_event(self) -> None:
        """total_duration_ms spans session start to the last event."""
        state = project_state(
            _events(("session.started", 100), ("coding.started", 600)), CONTEXT, now=9_999
        )
        assert state.metrics.total_duration_ms == 500

    def test_early_submission_skips_silent(self) -> None:
        """Submitting from CODING never enters SILENT."""
        state = project_state(
            _events(
                ("session.started", 0),
                ("coding.started", 10),
                ("coding.solution_submitted", 20),
            ),
            CONTEXT,
            now=30,
        )
        assert state.phase == Phase.SUMMARY
        assert state.silent_started_at is None
        assert state.metrics.silent_time_used_ms is None
        assert state.remaining_time_ms == 0


class TestNudgeAndFlagMetrics:
    """Tests for nudge counters and behaviour flags."""

    def test_nudge_counters_and_recorded_timings(self) -> None:
        """Recorded timings are used as-is."""
        state = project_state(
            _events(
                ("session.started", 0),
                ("coding.started", 0),
                ("nudge.requested", 100, {"timing": "late", "elapsed_ms": 100}),
            ),
            CONTEXT,
            now=200,
        )
        assert state.nudges_used == 1
        assert state.nudges_remaining == 1
        assert state.nudges_allowed
        assert state.metrics.nudge_timings == (NudgeTiming.LATE,)
        assert not state.metrics.all_nudges_used

    def test_missing_timing_is_recomputed(self) -> None:
        """Nudges without recorded timing are classified from timestamps."""
        state = project_state(
            _events(
                ("session.started", 0),
                ("coding.started", 1_000),
                ("nudge.requested", 2_000),
                ("nudge.requested", 8_000),
            ),
            CONTEXT,
            now=8_000,
        )
        assert state.metrics.nudge_timings == (NudgeTiming.EARLY, NudgeTiming.LATE)
        assert state.metrics.all_nudges_used
        assert state.nudges_remaining == 0
        assert not state.nudges_allowed

    def test_flags(self) -> None:
        """prep_time_expired and code_changed_in_silent flags."""
        state = project_state(
            _events(
                ("session.started", 0),
                ("prep.time_expired", 1_000),
                ("coding.started", 1_100),
                ("coding.silent_started", 2_000),
                ("coding.code_changed", 2_100, {"code": "late fix"}),
            ),
            CONTEXT,
            now=2_200,
        )
        assert state.metrics.prep_time_expired
        assert state.metrics.code_changed_in_silent
        assert state.metrics.code_changes_in_silent == 1
        assert state.code == "late fix"

    def test_projection_is_deterministic(self) -> None:
        """The same log, context and clock give equal states."""
        events = _events(("session.started", 0, {"session_id": "x"}), ("coding.started", 5))
        assert project_state(events, CONTEXT, now=10) == project_state(
            list(events), CONTEXT, now=10
        )

    def test_to_dict_is_plain(self) -> None:
        """to_dict() serializes enums and nested metrics."""
        state = project_state(_events(("session.started", 0)), CONTEXT, now=5)
        as_dict = state.to_dict()
        assert as_dict["phase"] == "PREP"
        assert as_dict["status"] == "in_progress"
        assert as_dict["metrics"]["nudge_timings"] == []
        assert as_dict["reflection"] is None
