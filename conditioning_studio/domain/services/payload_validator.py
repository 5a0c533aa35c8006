"""Payload validator - checks and normalizes dispatch payloads.

Structural problems (payload not a mapping, wrong field types, missing
required strings) are INVALID_PAYLOAD. Semantic problems (reflection
answers, a session.started that contradicts the session's creation
context) are VALIDATION_FAILED.

The validated payload is returned as a plain dict in the exact form it
will be stored in the event log.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from conditioning_studio.domain.events.event_types import SessionEventType
from conditioning_studio.domain.events.payloads import (
    SessionStartedPayload,
    dump_payload,
    schema_for,
)
from conditioning_studio.domain.models.dispatch_result import (
    DispatchErrorCode,
    DispatchFailure,
    failure,
)
from conditioning_studio.domain.models.session_context import SessionContext


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into a one-line message."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "payload"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


class PayloadValidator:
    """Validates payloads against their event schemas.

    Attributes:
        context: Creation-time context used to default and cross-check
            the session.started payload.
    """

    def __init__(self, context: SessionContext) -> None:
        self.context = context

    def validate(
        self,
        event_type: SessionEventType,
        payload: Any,
    ) -> dict[str, Any] | DispatchFailure:
        """Validate a payload for an event type.

        Args:
            event_type: The event being dispatched.
            payload: Caller-supplied payload (None means empty).

        Returns:
            The normalized payload dict, or a DispatchFailure.
        """
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            return failure(
                DispatchErrorCode.INVALID_PAYLOAD,
                f"payload must be a mapping, got {type(payload).__name__}",
            )

        schema = schema_for(event_type)
        try:
            validated = schema.model_validate(dict(payload))
        except ValidationError as exc:
            code = (
                DispatchErrorCode.VALIDATION_FAILED
                if event_type == SessionEventType.REFLECTION_SUBMITTED
                else DispatchErrorCode.INVALID_PAYLOAD
            )
            return failure(code, describe_validation_error(exc))

        if isinstance(validated, SessionStartedPayload):
            return self._complete_session_started(validated)
        return dump_payload(validated)

    def _complete_session_started(
        self, started: SessionStartedPayload
    ) -> dict[str, Any] | DispatchFailure:
        """Fill session.started from the creation context and cross-check it."""
        if started.problem is not None and started.problem.id != self.context.problem.id:
            return failure(
                DispatchErrorCode.VALIDATION_FAILED,
                f"problem {started.problem.id!r} does not match session problem "
                f"{self.context.problem.id!r}",
            )
        if started.preset is not None and started.preset != self.context.preset:
            return failure(
                DispatchErrorCode.VALIDATION_FAILED,
                f"preset {started.preset.value!r} does not match session preset "
                f"{self.context.preset.value!r}",
            )
        data: dict[str, Any] = {
            "problem": self.context.problem.to_dict(),
            "preset": self.context.preset.value,
        }
        if started.session_id is not None:
            data["session_id"] = started.session_id
        return data
