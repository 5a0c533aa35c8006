"""Test helpers for Conditioning Studio tests.

Helpers:
    FakeClock: Controllable millisecond clock for deterministic tests
    drive_to_phase: Dispatch the events that walk a session into a phase
    VALID_REFLECTION: A reflection payload that passes validation

Usage:
    from tests.helpers import FakeClock, drive_to_phase
"""

from tests.helpers.fake_clock import FakeClock
from tests.helpers.session_driver import VALID_REFLECTION, drive_to_phase

__all__ = ["FakeClock", "VALID_REFLECTION", "drive_to_phase"]
