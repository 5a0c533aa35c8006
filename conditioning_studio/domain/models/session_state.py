"""Derived session state snapshot.

SessionState is never stored. It is recomputed from the event log, the
session's creation context and the current clock reading every time a
caller asks for it (see StateProjector). Two sessions with the same log,
context and clock reading therefore produce equal snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from conditioning_studio.domain.events.payloads import ReflectionResponses
from conditioning_studio.domain.models.phase import Phase, SessionStatus
from conditioning_studio.domain.models.preset import Preset, PresetConfig
from conditioning_studio.domain.models.problem import Problem


class NudgeTiming(StrEnum):
    """When during CODING a nudge was requested.

    Thresholds on the fraction of the coding duration elapsed:
        EARLY: < 1/3
        MID: < 2/3
        LATE: otherwise
    """

    EARLY = "early"
    MID = "mid"
    LATE = "late"


@dataclass(frozen=True, eq=True)
class PhaseOverrun:
    """A timed phase that ran longer than its configured duration.

    Attributes:
        phase: The overrun phase (PREP, CODING or SILENT).
        over_by_ms: Milliseconds beyond the configured duration.
    """

    phase: Phase
    over_by_ms: int

    def __post_init__(self) -> None:
        if not self.phase.is_timed():
            raise ValueError(f"Only timed phases can overrun, got {self.phase}")
        if self.over_by_ms <= 0:
            raise ValueError(f"over_by_ms must be positive, got {self.over_by_ms}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"phase": self.phase.value, "over_by_ms": self.over_by_ms}


@dataclass(frozen=True, eq=True)
class SessionMetrics:
    """Timing, flag and nudge metrics derived from the event log.

    Time-used fields are None when the phase was never reached.
    """

    prep_time_used_ms: int | None = None
    coding_time_used_ms: int | None = None
    silent_time_used_ms: int | None = None
    total_duration_ms: int | None = None
    invariants_empty: bool = True
    prep_time_expired: bool = False
    all_nudges_used: bool = False
    code_changed_in_silent: bool = False
    nudge_timings: tuple[NudgeTiming, ...] = ()
    phase_overruns: tuple[PhaseOverrun, ...] = ()
    code_changes: int = 0
    code_changes_in_silent: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "prep_time_used_ms": self.prep_time_used_ms,
            "coding_time_used_ms": self.coding_time_used_ms,
            "silent_time_used_ms": self.silent_time_used_ms,
            "total_duration_ms": self.total_duration_ms,
            "invariants_empty": self.invariants_empty,
            "prep_time_expired": self.prep_time_expired,
            "all_nudges_used": self.all_nudges_used,
            "code_changed_in_silent": self.code_changed_in_silent,
            "nudge_timings": [timing.value for timing in self.nudge_timings],
            "phase_overruns": [overrun.to_dict() for overrun in self.phase_overruns],
            "code_changes": self.code_changes,
            "code_changes_in_silent": self.code_changes_in_silent,
        }


@dataclass(frozen=True, eq=True)
class SessionState:
    """Read-only view of a session at one clock reading.

    Attributes:
        session_id: Identifier recorded by session.started (None before start).
        phase: Current phase (None before session.started).
        status: Lifecycle status.
        problem: The problem under attempt.
        preset: Preset the session was created with.
        config: Resolved durations and nudge budget.
        invariants: Latest invariants text from PREP.
        code: Latest code text.
        nudges_used: Accepted nudge.requested events.
        nudges_remaining: nudge_budget - nudges_used.
        nudges_allowed: True only in CODING with budget left.
        is_recording: True between audio.started and audio.stopped.
        remaining_time_ms: Time left in the active timed phase; negative
            once the phase overruns, 0 in untimed phases.
        reflection: Submitted reflection responses, if any.
        event_count: Number of events in the log.
        metrics: Derived timing and behaviour metrics.
    """

    session_id: str | None
    phase: Phase | None
    status: SessionStatus
    problem: Problem
    preset: Preset
    config: PresetConfig
    invariants: str
    code: str
    nudges_used: int
    nudges_remaining: int
    nudges_allowed: bool
    is_recording: bool
    remaining_time_ms: int
    reflection: ReflectionResponses | None
    started_at: int | None
    prep_started_at: int | None
    coding_started_at: int | None
    silent_started_at: int | None
    summary_started_at: int | None
    reflection_started_at: int | None
    completed_at: int | None
    abandoned_at: int | None
    event_count: int
    metrics: SessionMetrics

    @property
    def is_terminal(self) -> bool:
        """Check if the session accepts no further events."""
        return self.status.is_terminal() or (
            self.phase is not None and self.phase.is_terminal()
        )

    @property
    def has_started(self) -> bool:
        """Check if session.started has been accepted."""
        return self.phase is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "session_id": self.session_id,
            "phase": self.phase.value if self.phase is not None else None,
            "status": self.status.value,
            "problem": self.problem.to_dict(),
            "preset": self.preset.value,
            "config": self.config.to_dict(),
            "invariants": self.invariants,
            "code": self.code,
            "nudges_used": self.nudges_used,
            "nudges_remaining": self.nudges_remaining,
            "nudges_allowed": self.nudges_allowed,
            "is_recording": self.is_recording,
            "remaining_time_ms": self.remaining_time_ms,
            "reflection": (
                self.reflection.model_dump(mode="json")
                if self.reflection is not None
                else None
            ),
            "started_at": self.started_at,
            "prep_started_at": self.prep_started_at,
            "coding_started_at": self.coding_started_at,
            "silent_started_at": self.silent_started_at,
            "summary_started_at": self.summary_started_at,
            "reflection_started_at": self.reflection_started_at,
            "completed_at": self.completed_at,
            "abandoned_at": self.abandoned_at,
            "event_count": self.event_count,
            "metrics": self.metrics.to_dict(),
        }
