"""Dispatch result models.

Every call to Session.dispatch() returns exactly one of two frozen values:

    DispatchSuccess(event=...)   - the event was appended to the log
    DispatchFailure(error=...)   - nothing was appended, state is unchanged

Rejections are never raised. Callers branch on ``result.ok`` (or on the
concrete type with ``match``) and must handle both variants.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Literal

from conditioning_studio.domain.events.event import SessionEvent


class DispatchErrorCode(StrEnum):
    """Reasons a dispatch can be rejected.

    Structural (caller sent malformed input):
        INVALID_EVENT, INVALID_EVENT_TYPE, INVALID_PAYLOAD
    Phase (legal event at the wrong moment):
        INVALID_PHASE, INVALID_TRANSITION
    Lifecycle:
        SESSION_TERMINATED
    Semantic:
        VALIDATION_FAILED
    Nudges:
        NUDGE_BUDGET_EXHAUSTED, NUDGES_DISABLED_IN_PHASE
    """

    INVALID_TRANSITION = "INVALID_TRANSITION"
    INVALID_PHASE = "INVALID_PHASE"
    SESSION_TERMINATED = "SESSION_TERMINATED"
    INVALID_EVENT = "INVALID_EVENT"
    INVALID_EVENT_TYPE = "INVALID_EVENT_TYPE"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NUDGE_BUDGET_EXHAUSTED = "NUDGE_BUDGET_EXHAUSTED"
    NUDGES_DISABLED_IN_PHASE = "NUDGES_DISABLED_IN_PHASE"


@dataclass(frozen=True, eq=True)
class DispatchError:
    """Why a dispatch was rejected.

    Attributes:
        code: Machine-readable rejection reason.
        message: Human-readable explanation.
    """

    code: DispatchErrorCode
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"code": self.code.value, "message": self.message}


@dataclass(frozen=True, eq=True)
class DispatchSuccess:
    """An accepted dispatch.

    Attributes:
        event: The event appended to the log.
    """

    event: SessionEvent
    ok: Literal[True] = True


@dataclass(frozen=True, eq=True)
class DispatchFailure:
    """A rejected dispatch.

    Attributes:
        error: The rejection reason.
    """

    error: DispatchError
    ok: Literal[False] = False

    @property
    def code(self) -> DispatchErrorCode:
        """Shortcut for error.code."""
        return self.error.code


DispatchResult = DispatchSuccess | DispatchFailure


def success(event: SessionEvent) -> DispatchSuccess:
    """Build a successful dispatch result."""
    return DispatchSuccess(event=event)


def failure(code: DispatchErrorCode, message: str) -> DispatchFailure:
    """Build a rejected dispatch result."""
    return DispatchFailure(error=DispatchError(code=code, message=message))
