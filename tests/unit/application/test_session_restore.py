"""Unit tests for Session.restore()."""

from __future__ import annotations

import pytest

from conditioning_studio.application.services.session_service import Session, create_session
from conditioning_studio.domain.errors.event_log import InvalidEventLogError
from conditioning_studio.domain.models.phase import Phase, SessionStatus
from conditioning_studio.domain.models.preset import Preset
from conditioning_studio.domain.models.problem import Problem
from tests.helpers import VALID_REFLECTION, FakeClock, drive_to_phase


def _recorded_session(problem: Problem, clock: FakeClock) -> Session:
    session = create_session(problem, preset=Preset.STANDARD, clock=clock)
    session.dispatch("session.started")
    session.dispatch("prep.invariants_changed", {"invariants": "sorted"})
    clock.advance(minutes=6)
    session.dispatch("coding.started")
    clock.advance(minutes=3)
    session.dispatch("nudge.requested")
    session.dispatch("coding.code_changed", {"code": "return []"})
    clock.advance(minutes=10)
    return session


class TestRestoreRoundTrip:
    """Tests that a restored log reproduces the original state."""

    def test_restored_state_matches(self, problem: Problem, fake_clock: FakeClock) -> None:
        """restore(get_events()) on a fresh session yields an identical state."""
        original = _recorded_session(problem, fake_clock)
        fresh = create_session(problem, preset=Preset.STANDARD, clock=fake_clock)

        fresh.restore(original.get_events())

        assert fresh.get_state() == original.get_state()
        assert fresh.get_events() == original.get_events()

    def test_restore_from_dicts(self, problem: Problem, fake_clock: FakeClock) -> None:
        """The to_dict() form restores to the same state."""
        original = _recorded_session(problem, fake_clock)
        fresh = create_session(problem, preset=Preset.STANDARD, clock=fake_clock)

        fresh.restore([event.to_dict() for event in original.get_events()])

        assert fresh.get_state() == original.get_state()
        assert fresh.get_state().metrics.prep_time_used_ms == 6 * 60_000

    def test_restored_session_continues(self, problem: Problem, fake_clock: FakeClock) -> None:
        """Dispatch works on top of a restored log."""
        original = _recorded_session(problem, fake_clock)
        fresh = create_session(problem, preset=Preset.STANDARD, clock=fake_clock)
        fresh.restore(original.get_events())

        assert fresh.dispatch("coding.solution_submitted").ok
        assert fresh.get_state().phase == Phase.SUMMARY
        assert len(fresh.get_events()) == len(original.get_events()) + 1

    def test_restore_completed_session(
        self, session: Session, problem: Problem, fake_clock: FakeClock
    ) -> None:
        """A completed log restores as completed."""
        drive_to_phase(session, Phase.DONE)
        fresh = create_session(problem, preset=Preset.STANDARD, clock=fake_clock)
        fresh.restore(session.get_events())
        assert fresh.get_state().status == SessionStatus.COMPLETED
        assert fresh.get_state().reflection == session.get_state().reflection

    def test_restore_does_not_notify(
        self, session: Session, fake_clock: FakeClock, problem: Problem
    ) -> None:
        """Listeners only hear about dispatched events."""
        drive_to_phase(session, Phase.CODING)
        fresh = create_session(problem, preset=Preset.STANDARD, clock=fake_clock)
        received = []
        fresh.subscribe(lambda event, state: received.append(event))
        fresh.restore(session.get_events())
        assert received == []


class TestRestoreRejection:
    """Tests for inconsistent sequences."""

    def test_invalid_sequence_leaves_log_untouched(self, session: Session) -> None:
        """A rejected restore keeps the current log."""
        drive_to_phase(session, Phase.CODING)
        before = session.get_events()
        with pytest.raises(InvalidEventLogError):
            session.restore(
                [
                    {"type": "session.started", "timestamp": 10, "data": {}},
                    {"type": "coding.started", "timestamp": 5, "data": {}},
                ]
            )
        assert session.get_events() == before

    def test_unknown_event_type(self, session: Session) -> None:
        """Unknown types cannot be restored."""
        with pytest.raises(InvalidEventLogError, match="unknown event type"):
            session.restore(
                [
                    {"type": "session.started", "timestamp": 0},
                    {"type": "coding.paused", "timestamp": 1},
                ]
            )

    def test_events_after_abandon(self, session: Session) -> None:
        """Nothing may follow a terminal event."""
        with pytest.raises(InvalidEventLogError, match="terminal"):
            session.restore(
                [
                    {"type": "session.started", "timestamp": 0},
                    {"type": "session.abandoned", "timestamp": 1},
                    {"type": "audio.started", "timestamp": 2},
                ]
            )

    def test_reflection_without_summary(self, session: Session) -> None:
        """A log that jumps from PREP to a reflection is not restorable."""
        with pytest.raises(InvalidEventLogError, match="not allowed in phase PREP"):
            session.restore(
                [
                    {"type": "session.started", "timestamp": 0},
                    {
                        "type": "reflection.submitted",
                        "timestamp": 1,
                        "data": VALID_REFLECTION,
                    },
                    {"type": "session.completed", "timestamp": 1},
                ]
            )
        assert session.get_events() == ()

    def test_phase_regression(self, session: Session) -> None:
        """A log that moves from SILENT back to CODING is not restorable."""
        with pytest.raises(InvalidEventLogError, match="not allowed in phase SILENT"):
            session.restore(
                [
                    {"type": "session.started", "timestamp": 0},
                    {"type": "coding.started", "timestamp": 1},
                    {"type": "coding.silent_started", "timestamp": 2},
                    {"type": "coding.started", "timestamp": 3},
                ]
            )

    def test_nudges_over_session_budget(self, problem: Problem, fake_clock: FakeClock) -> None:
        """The session's own nudge budget bounds the restored nudges."""
        sequence = [
            {"type": "session.started", "timestamp": 0},
            {"type": "coding.started", "timestamp": 1},
            {"type": "nudge.requested", "timestamp": 2},
            {"type": "nudge.requested", "timestamp": 3},
        ]
        high_pressure = create_session(problem, preset=Preset.HIGH_PRESSURE, clock=fake_clock)
        with pytest.raises(InvalidEventLogError, match="budget of 1"):
            high_pressure.restore(sequence)
        assert high_pressure.get_events() == ()

        standard = create_session(problem, preset=Preset.STANDARD, clock=fake_clock)
        standard.restore(sequence)
        state = standard.get_state()
        assert state.nudges_used + state.nudges_remaining == state.config.nudge_budget
