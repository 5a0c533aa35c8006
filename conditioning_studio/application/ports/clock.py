"""Clock port - the session engine's only source of time.

Every timestamp in a session comes from the clock injected at
create_session(). A clock is any zero-argument callable returning the
current time as integer milliseconds; readings must never decrease
within one session.

Team Agreement:
> No time.time() or datetime.now() calls in engine code - always go
> through the injected clock (enforced by scripts/check_no_wall_clock.py)

For production:
    Use system_clock (the default)

For testing:
    Use FakeClock from tests/helpers/fake_clock.py
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeAlias

Clock: TypeAlias = Callable[[], int]


class SystemClock:
    """Wall-clock milliseconds since the Unix epoch.

    Example:
        >>> clock = SystemClock()
        >>> now = clock()
    """

    def __call__(self) -> int:
        """Return the current time in integer milliseconds."""
        return time.time_ns() // 1_000_000

    def __repr__(self) -> str:
        return "SystemClock()"


system_clock: Clock = SystemClock()
