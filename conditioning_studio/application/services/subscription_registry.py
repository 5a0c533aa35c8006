"""Subscription registry - notifies listeners of accepted events.

Listeners are called synchronously, after the event has been committed
to the log, with ``(event, state)`` where ``state`` is the projection of
the log up to and including that event.

A listener that raises is logged with its traceback and skipped; the
committed event stays committed and the remaining listeners still run.
Notification walks a snapshot of the listener list, so a listener may
unsubscribe itself (or others) while being notified.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from conditioning_studio.domain.events.event import SessionEvent
from conditioning_studio.domain.models.session_state import SessionState

logger = structlog.get_logger(__name__)

Listener = Callable[[SessionEvent, SessionState], None]
Unsubscribe = Callable[[], None]


class SubscriptionRegistry:
    """Ordered set of session listeners."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register a listener.

        Args:
            listener: Callable invoked with (event, state) per accepted event.

        Returns:
            A function that removes this registration. Calling it more
            than once is a no-op.
        """
        if not callable(listener):
            raise TypeError(f"listener must be callable, got {type(listener).__name__}")
        self._listeners.append(listener)
        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if subscribed:
                subscribed = False
                self._listeners.remove(listener)

        return unsubscribe

    def notify(
        self,
        event: SessionEvent,
        state: SessionState,
        *,
        session_id: str | None = None,
    ) -> None:
        """Call every currently registered listener with (event, state)."""
        for listener in tuple(self._listeners):
            try:
                listener(event, state)
            except Exception as e:
                logger.error(
                    "listener_failed",
                    session_id=session_id,
                    event_type=event.type.value,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
