"""
Conditioning Studio - Interview Practice Session Engine

An event-sourced phase state machine that walks a candidate through a
timed practice exercise: preparation, coding, an enforced silent period,
summary and a mandatory self-reflection.

Engine Guarantees:
- The event log is append-only and is the only source of truth
- Every rejected dispatch is a value, never an exception
- Derived state is a pure fold over the log and the injected clock
- Phases only move forward
"""

from conditioning_studio.application.services.export_service import (
    SessionExport,
    build_session_export,
)
from conditioning_studio.application.services.session_service import (
    Session,
    create_session,
)
from conditioning_studio.domain.models.dispatch_result import (
    DispatchErrorCode,
    DispatchFailure,
    DispatchResult,
    DispatchSuccess,
)
from conditioning_studio.domain.models.phase import Phase, SessionStatus
from conditioning_studio.domain.models.preset import Preset, PresetConfig
from conditioning_studio.domain.models.problem import Problem

__version__ = "0.1.0"
__all__ = [
    "DispatchErrorCode",
    "DispatchFailure",
    "DispatchResult",
    "DispatchSuccess",
    "Phase",
    "Preset",
    "PresetConfig",
    "Problem",
    "Session",
    "SessionExport",
    "SessionStatus",
    "__version__",
    "build_session_export",
    "create_session",
]
