"""Unit tests for the nudge tracker."""

from __future__ import annotations

import pytest

from conditioning_studio.domain.models.dispatch_result import DispatchErrorCode
from conditioning_studio.domain.models.phase import Phase
from conditioning_studio.domain.models.session_state import NudgeTiming
from conditioning_studio.domain.services.nudge_tracker import (
    NudgeTracker,
    classify_nudge_timing,
)

CODING_MS = 900_000


class TestClassifyNudgeTiming:
    """Tests for early/mid/late classification."""

    @pytest.mark.parametrize(
        ("elapsed_ms", "expected"),
        [
            (200_000, NudgeTiming.EARLY),
            (450_000, NudgeTiming.MID),
            (800_000, NudgeTiming.LATE),
        ],
    )
    def test_reference_points(self, elapsed_ms: int, expected: NudgeTiming) -> None:
        """Nudges at 200s/450s/800s of a 900s coding phase."""
        assert classify_nudge_timing(elapsed_ms, CODING_MS) == expected

    def test_thresholds_are_exact(self) -> None:
        """Exactly one third is mid, exactly two thirds is late."""
        assert classify_nudge_timing(299_999, CODING_MS) == NudgeTiming.EARLY
        assert classify_nudge_timing(300_000, CODING_MS) == NudgeTiming.MID
        assert classify_nudge_timing(599_999, CODING_MS) == NudgeTiming.MID
        assert classify_nudge_timing(600_000, CODING_MS) == NudgeTiming.LATE

    def test_clamping(self) -> None:
        """Negative elapsed time is early, overrun is late."""
        assert classify_nudge_timing(-5, CODING_MS) == NudgeTiming.EARLY
        assert classify_nudge_timing(5 * CODING_MS, CODING_MS) == NudgeTiming.LATE


class TestNudgeTracker:
    """Tests for budget enforcement."""

    def test_grants_within_budget(self) -> None:
        """A nudge in CODING with budget left is allowed."""
        tracker = NudgeTracker(nudge_budget=2, coding_duration_ms=CODING_MS)
        assert tracker.check(Phase.CODING, nudges_used=1) is None

    def test_budget_exhausted(self) -> None:
        """No nudges once the budget is used up."""
        tracker = NudgeTracker(nudge_budget=2, coding_duration_ms=CODING_MS)
        result = tracker.check(Phase.CODING, nudges_used=2)
        assert result is not None
        assert result.code == DispatchErrorCode.NUDGE_BUDGET_EXHAUSTED

    def test_zero_budget_is_exhausted_immediately(self) -> None:
        """no_assistance sessions never get a nudge."""
        tracker = NudgeTracker(nudge_budget=0, coding_duration_ms=CODING_MS)
        result = tracker.check(Phase.CODING, nudges_used=0)
        assert result is not None
        assert result.code == DispatchErrorCode.NUDGE_BUDGET_EXHAUSTED

    @pytest.mark.parametrize("phase", [None, Phase.PREP, Phase.SILENT, Phase.SUMMARY])
    def test_disabled_outside_coding(self, phase: Phase | None) -> None:
        """The tracker refuses nudges outside CODING."""
        tracker = NudgeTracker(nudge_budget=3, coding_duration_ms=CODING_MS)
        result = tracker.check(phase, nudges_used=0)
        assert result is not None
        assert result.code == DispatchErrorCode.NUDGES_DISABLED_IN_PHASE

    def test_remaining_never_negative(self) -> None:
        """remaining() is clamped at zero."""
        tracker = NudgeTracker(nudge_budget=1, coding_duration_ms=CODING_MS)
        assert tracker.remaining(0) == 1
        assert tracker.remaining(3) == 0

    def test_grant_records_timing_and_elapsed(self) -> None:
        """grant() builds the data stored on nudge.requested."""
        tracker = NudgeTracker(nudge_budget=3, coding_duration_ms=CODING_MS)
        assert tracker.grant(coding_started_at=1_000, now=451_000) == {
            "timing": "mid",
            "elapsed_ms": 450_000,
        }
