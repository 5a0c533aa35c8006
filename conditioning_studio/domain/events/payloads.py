"""Pydantic payload schemas for session events.

Each event type with a structured payload has a schema here; every other
event type validates against EmptyPayload, so nothing the caller sends
along with it reaches the event log. Field names
are snake_case; the camelCase spellings used by earlier persisted logs
(``prolongedStall``, ``sessionId``...) are accepted as aliases on input.
Validated payloads are stored in the event log in their snake_case
``model_dump()`` form.

Developer Golden Rules:
1. VALIDATE EARLY - Pydantic handles schema validation
2. Strict strings - numbers are never coerced into code or invariants
3. Cross-field rules live in model validators, not in the session
"""

from __future__ import annotations

from typing import Annotated, Any, Final, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictStr,
    StringConstraints,
    model_validator,
)

from conditioning_studio.domain.events.event_types import SessionEventType
from conditioning_studio.domain.models.preset import Preset

ClearApproach = Literal["yes", "partially", "no"]
ProlongedStall = Literal["yes", "no"]
RecoveredFromStall = Literal["yes", "partially", "no", "n/a"]
TimePressure = Literal["comfortable", "manageable", "overwhelming"]
WouldChangeApproach = Literal["yes", "no"]

NOT_APPLICABLE: Final[str] = "n/a"


class EventPayload(BaseModel):
    """Base class for all event payload schemas."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class EmptyPayload(EventPayload):
    """Payload of events that carry no caller data. Extra keys are dropped."""


class ProblemPayload(EventPayload):
    """Problem supplied inline with session.started."""

    id: StrictStr = Field(..., min_length=1)
    title: StrictStr = ""
    description: StrictStr = ""


class SessionStartedPayload(EventPayload):
    """Payload of session.started. Every field is optional."""

    session_id: Annotated[StrictStr, StringConstraints(min_length=1)] | None = Field(
        default=None,
        validation_alias=AliasChoices("session_id", "sessionId"),
    )
    problem: ProblemPayload | None = None
    preset: Preset | None = None


class InvariantsChangedPayload(EventPayload):
    """Payload of prep.invariants_changed."""

    invariants: StrictStr


class CodeChangedPayload(EventPayload):
    """Payload of coding.code_changed."""

    code: StrictStr


class ReflectionResponses(EventPayload):
    """The five self-reflection answers, validated as a unit.

    ``recovered_from_stall`` may only be "n/a" when ``prolonged_stall`` is
    "no"; after a prolonged stall the candidate must say whether they
    recovered.
    """

    clear_approach: ClearApproach = Field(
        validation_alias=AliasChoices("clear_approach", "clearApproach")
    )
    prolonged_stall: ProlongedStall = Field(
        validation_alias=AliasChoices("prolonged_stall", "prolongedStall")
    )
    recovered_from_stall: RecoveredFromStall = Field(
        validation_alias=AliasChoices("recovered_from_stall", "recoveredFromStall")
    )
    time_pressure: TimePressure = Field(
        validation_alias=AliasChoices("time_pressure", "timePressure")
    )
    would_change_approach: WouldChangeApproach = Field(
        validation_alias=AliasChoices("would_change_approach", "wouldChangeApproach")
    )

    @model_validator(mode="after")
    def validate_stall_recovery(self) -> ReflectionResponses:
        if self.recovered_from_stall == NOT_APPLICABLE and self.prolonged_stall != "no":
            raise ValueError(
                "recovered_from_stall can only be 'n/a' when prolonged_stall is 'no'"
            )
        return self


class ReflectionSubmittedPayload(EventPayload):
    """Payload of reflection.submitted."""

    responses: ReflectionResponses


PAYLOAD_SCHEMAS: Final[dict[SessionEventType, type[EventPayload]]] = {
    SessionEventType.SESSION_STARTED: SessionStartedPayload,
    SessionEventType.PREP_INVARIANTS_CHANGED: InvariantsChangedPayload,
    SessionEventType.CODING_CODE_CHANGED: CodeChangedPayload,
    SessionEventType.REFLECTION_SUBMITTED: ReflectionSubmittedPayload,
}


def schema_for(event_type: SessionEventType) -> type[EventPayload]:
    """Get the payload schema for an event type.

    Event types without a structured payload get EmptyPayload.
    """
    return PAYLOAD_SCHEMAS.get(event_type, EmptyPayload)


def dump_payload(payload: EventPayload) -> dict[str, Any]:
    """Serialize a validated payload into the form stored in the log."""
    return payload.model_dump(mode="json", exclude_none=True)
