"""
Pytest configuration and shared fixtures for Conditioning Studio tests.

Testing Standards:
- Sessions always get a FakeClock; never depend on wall-clock time
- Unit tests go in tests/unit/<layer>/
- Test file names are unique across the tree (no __init__.py in test dirs)
"""

import pytest
import structlog

from conditioning_studio.application.services.session_service import (
    Session,
    create_session,
)
from conditioning_studio.domain.models.preset import Preset, PresetConfig
from conditioning_studio.domain.models.problem import Problem
from tests.helpers import FakeClock


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from conditioning_studio import __version__

    return __version__


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fake_clock() -> FakeClock:
    """A FakeClock starting at t=1_000_000 ms."""
    return FakeClock(start_ms=1_000_000)


@pytest.fixture
def problem() -> Problem:
    """The problem used by most session tests."""
    return Problem(
        id="two-sum",
        title="Two Sum",
        description="Return indices of the two numbers that add up to target.",
    )


@pytest.fixture
def session(problem: Problem, fake_clock: FakeClock) -> Session:
    """A fresh standard-preset session on the fake clock."""
    return create_session(problem, preset=Preset.STANDARD, clock=fake_clock)


@pytest.fixture
def short_config() -> PresetConfig:
    """Small durations that are easy to reason about in timing tests."""
    return PresetConfig(
        prep_duration_ms=60_000,
        coding_duration_ms=900_000,
        silent_duration_ms=30_000,
        nudge_budget=3,
    )


@pytest.fixture
def timed_session(problem: Problem, fake_clock: FakeClock, short_config: PresetConfig) -> Session:
    """A session using short_config on the fake clock."""
    return create_session(problem, clock=fake_clock, config=short_config, preset=Preset.STANDARD)
