"""Session presets and their resolved timing configuration.

Preset timing:
| Preset         | Prep  | Coding | Silent | Nudges |
| standard       | 5 min | 35 min | 5 min  | 3      |
| high_pressure  | 3 min | 25 min | 2 min  | 1      |
| no_assistance  | 5 min | 35 min | 5 min  | 0      |

A session resolves its PresetConfig exactly once, at creation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final

MINUTE_MS: Final[int] = 60 * 1000

# Upper bound for any single phase (4 hours)
MAX_PHASE_DURATION_MS: Final[int] = 240 * MINUTE_MS

# Upper bound for the nudge budget
MAX_NUDGE_BUDGET: Final[int] = 10


class Preset(StrEnum):
    """Named bundle of phase durations and nudge budget."""

    STANDARD = "standard"
    HIGH_PRESSURE = "high_pressure"
    NO_ASSISTANCE = "no_assistance"


@dataclass(frozen=True)
class PresetConfig:
    """Resolved durations (milliseconds) and nudge budget of a session.

    Attributes:
        prep_duration_ms: Length of the PREP phase.
        coding_duration_ms: Length of the CODING phase.
        silent_duration_ms: Length of the SILENT phase.
        nudge_budget: Number of nudges the candidate may request.
    """

    prep_duration_ms: int
    coding_duration_ms: int
    silent_duration_ms: int
    nudge_budget: int

    def __post_init__(self) -> None:
        """Validate configuration values."""
        for name in ("prep_duration_ms", "coding_duration_ms", "silent_duration_ms"):
            value = getattr(self, name)
            if not 0 < value <= MAX_PHASE_DURATION_MS:
                raise ValueError(
                    f"{name} must be between 1 and {MAX_PHASE_DURATION_MS}, got {value}"
                )
        if not 0 <= self.nudge_budget <= MAX_NUDGE_BUDGET:
            raise ValueError(
                f"nudge_budget must be between 0 and {MAX_NUDGE_BUDGET}, "
                f"got {self.nudge_budget}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "prep_duration_ms": self.prep_duration_ms,
            "coding_duration_ms": self.coding_duration_ms,
            "silent_duration_ms": self.silent_duration_ms,
            "nudge_budget": self.nudge_budget,
        }


PRESET_CONFIGS: Final[dict[Preset, PresetConfig]] = {
    Preset.STANDARD: PresetConfig(
        prep_duration_ms=5 * MINUTE_MS,
        coding_duration_ms=35 * MINUTE_MS,
        silent_duration_ms=5 * MINUTE_MS,
        nudge_budget=3,
    ),
    Preset.HIGH_PRESSURE: PresetConfig(
        prep_duration_ms=3 * MINUTE_MS,
        coding_duration_ms=25 * MINUTE_MS,
        silent_duration_ms=2 * MINUTE_MS,
        nudge_budget=1,
    ),
    Preset.NO_ASSISTANCE: PresetConfig(
        prep_duration_ms=5 * MINUTE_MS,
        coding_duration_ms=35 * MINUTE_MS,
        silent_duration_ms=5 * MINUTE_MS,
        nudge_budget=0,
    ),
}


def get_preset_config(preset: Preset | str) -> PresetConfig:
    """Resolve a preset to its configuration.

    Args:
        preset: A Preset or its string value.

    Returns:
        The preset's PresetConfig.

    Raises:
        ValueError: If the preset name is unknown.
    """
    return PRESET_CONFIGS[Preset(preset)]
