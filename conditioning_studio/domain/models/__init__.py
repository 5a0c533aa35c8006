"""Domain models for Conditioning Studio.

Contains value objects that represent core session concepts. These
models are immutable and contain no infrastructure dependencies.
"""

from conditioning_studio.domain.models.phase import Phase, SessionStatus
from conditioning_studio.domain.models.preset import (
    PRESET_CONFIGS,
    Preset,
    PresetConfig,
    get_preset_config,
)
from conditioning_studio.domain.models.problem import Problem

__all__: list[str] = [
    "PRESET_CONFIGS",
    "Phase",
    "Preset",
    "PresetConfig",
    "Problem",
    "SessionStatus",
    "get_preset_config",
]
