"""Domain services for Conditioning Studio.

Pure rule components used by the Session aggregate:
- phase_guard: event vocabulary, lifecycle and phase legality
- payload_validator: schema validation and normalization
- nudge_tracker: nudge budget and timing classification
- expiry_trigger: expiry events for timed phases
- state_projector: event log -> SessionState fold
"""

from conditioning_studio.domain.services.expiry_trigger import due_expiry_event
from conditioning_studio.domain.services.nudge_tracker import (
    NudgeTracker,
    classify_nudge_timing,
)
from conditioning_studio.domain.services.payload_validator import PayloadValidator
from conditioning_studio.domain.services.phase_guard import (
    check_transition,
    resolve_event_type,
)
from conditioning_studio.domain.services.state_projector import project_state

__all__: list[str] = [
    "NudgeTracker",
    "PayloadValidator",
    "check_transition",
    "classify_nudge_timing",
    "due_expiry_event",
    "project_state",
    "resolve_event_type",
]
