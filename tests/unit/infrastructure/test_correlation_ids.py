"""Unit tests for correlation ID handling."""

from __future__ import annotations

import uuid

import pytest

from conditioning_studio.infrastructure.observability.correlation import (
    correlation_id_processor,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def clear_correlation_id():
    """Start and end each test without a correlation ID."""
    set_correlation_id("")
    yield
    set_correlation_id("")


class TestGenerateCorrelationId:
    """Tests for generate_correlation_id()."""

    def test_uuid7(self) -> None:
        """IDs are version 7 UUIDs."""
        assert uuid.UUID(generate_correlation_id()).version == 7

    def test_unique(self) -> None:
        """Consecutive IDs differ."""
        assert generate_correlation_id() != generate_correlation_id()


class TestCorrelationScope:
    """Tests for correlation_scope()."""

    def test_binds_and_restores(self) -> None:
        """The ID is visible inside the block only."""
        with correlation_scope("outer") as bound:
            assert bound == "outer"
            assert get_correlation_id() == "outer"
            with correlation_scope() as inner:
                assert get_correlation_id() == inner != "outer"
            assert get_correlation_id() == "outer"
        assert get_correlation_id() == ""

    def test_restores_on_error(self) -> None:
        """An exception inside the block still restores the previous ID."""
        with pytest.raises(RuntimeError):
            with correlation_scope("failing"):
                raise RuntimeError("boom")
        assert get_correlation_id() == ""


class TestCorrelationIdProcessor:
    """Tests for the structlog processor."""

    def test_adds_current_id(self) -> None:
        """The bound ID is added to the event dict."""
        with correlation_scope("corr-1"):
            event_dict = correlation_id_processor(None, "info", {"event": "x"})
        assert event_dict["correlation_id"] == "corr-1"

    def test_no_id_leaves_dict_alone(self) -> None:
        """Nothing is added when no ID is set."""
        assert correlation_id_processor(None, "info", {"event": "x"}) == {"event": "x"}

    def test_explicit_value_wins(self) -> None:
        """An explicitly logged correlation_id is not overwritten."""
        with correlation_scope("corr-1"):
            event_dict = correlation_id_processor(
                None, "info", {"event": "x", "correlation_id": "explicit"}
            )
        assert event_dict["correlation_id"] == "explicit"
