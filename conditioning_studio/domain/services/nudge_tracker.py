"""Nudge tracker - enforces the nudge budget and classifies nudge timing.

A nudge is a hint requested during CODING. The budget comes from the
session's PresetConfig; ``nudges_used`` is simply the number of accepted
nudge.requested events in the log.

Timing is classified by the fraction of the coding duration elapsed when
the nudge was accepted, clamped to [0, 1]:

    f < 1/3  -> early
    f < 2/3  -> mid
    else     -> late
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from conditioning_studio.domain.models.dispatch_result import (
    DispatchErrorCode,
    DispatchFailure,
    failure,
)
from conditioning_studio.domain.models.phase import Phase
from conditioning_studio.domain.models.session_state import NudgeTiming


def classify_nudge_timing(elapsed_ms: int, coding_duration_ms: int) -> NudgeTiming:
    """Classify a nudge by how far into CODING it was requested.

    Integer comparisons keep the thresholds exact: elapsed / duration < 1/3
    is evaluated as 3 * elapsed < duration. Negative elapsed time clamps to
    early and anything past the duration clamps to late.

    Args:
        elapsed_ms: Milliseconds since coding.started.
        coding_duration_ms: Configured CODING duration.

    Returns:
        EARLY, MID or LATE.
    """
    elapsed = min(max(elapsed_ms, 0), coding_duration_ms)
    if 3 * elapsed < coding_duration_ms:
        return NudgeTiming.EARLY
    if 3 * elapsed < 2 * coding_duration_ms:
        return NudgeTiming.MID
    return NudgeTiming.LATE


@dataclass(frozen=True)
class NudgeTracker:
    """Budget enforcement for nudge.requested.

    Attributes:
        nudge_budget: Nudges allowed for the session.
        coding_duration_ms: CODING duration used for timing classification.
    """

    nudge_budget: int
    coding_duration_ms: int

    def remaining(self, nudges_used: int) -> int:
        """Get nudges left, never below zero."""
        return max(self.nudge_budget - nudges_used, 0)

    def check(self, phase: Phase | None, nudges_used: int) -> DispatchFailure | None:
        """Check whether a nudge may be granted.

        Args:
            phase: Current phase.
            nudges_used: Nudges accepted so far.

        Returns:
            None if the nudge may be granted, otherwise the rejection.
        """
        if phase != Phase.CODING:
            phase_name = phase.value if phase is not None else "not started"
            return failure(
                DispatchErrorCode.NUDGES_DISABLED_IN_PHASE,
                f"nudges are not available in phase {phase_name}",
            )
        if nudges_used >= self.nudge_budget:
            return failure(
                DispatchErrorCode.NUDGE_BUDGET_EXHAUSTED,
                f"all {self.nudge_budget} nudges have been used",
            )
        return None

    def grant(self, coding_started_at: int, now: int) -> dict[str, Any]:
        """Build the nudge.requested data recorded for an accepted nudge.

        Args:
            coding_started_at: Timestamp of coding.started.
            now: Timestamp of the nudge.

        Returns:
            Event data with the timing classification and elapsed time.
        """
        elapsed_ms = now - coding_started_at
        timing = classify_nudge_timing(elapsed_ms, self.coding_duration_ms)
        return {"timing": timing.value, "elapsed_ms": elapsed_ms}
