"""Creation-time context of a session."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from conditioning_studio.domain.models.phase import Phase
from conditioning_studio.domain.models.preset import Preset, PresetConfig
from conditioning_studio.domain.models.problem import Problem


@dataclass(frozen=True, eq=True)
class SessionContext:
    """Everything fixed at create_session() time.

    The event log and this context together determine every projected
    state, given a clock reading.

    Attributes:
        problem: The problem under attempt.
        preset: The preset the session was created with.
        config: Resolved durations and nudge budget.
    """

    problem: Problem
    preset: Preset
    config: PresetConfig

    def duration_for(self, phase: Phase) -> int:
        """Get the configured duration of a timed phase in milliseconds.

        Raises:
            KeyError: If the phase is not timed.
        """
        durations = {
            Phase.PREP: self.config.prep_duration_ms,
            Phase.CODING: self.config.coding_duration_ms,
            Phase.SILENT: self.config.silent_duration_ms,
        }
        return durations[phase]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "problem": self.problem.to_dict(),
            "preset": self.preset.value,
            "config": self.config.to_dict(),
        }
