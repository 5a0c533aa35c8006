"""Structured logging configuration with structlog.

The engine logs through ``structlog.get_logger(__name__)`` and never
configures logging itself. The host calls configure_structlog() once at
startup.

Log events emitted by the engine:
    event_appended     info     an event was committed to a session log
    dispatch_rejected  warning  a dispatch returned DispatchFailure
    phase_expired      info     check_expiry() found a due expiry event
    session_restored   info     restore() replaced a session log
    restore_rejected   warning  restore() refused an inconsistent sequence
    listener_failed    error    a subscriber raised (with traceback)
    session_exported   info     an export bundle was built

Usage:
    from conditioning_studio.infrastructure.observability import configure_structlog

    configure_structlog()                          # STUDIO_LOG_ENVIRONMENT
    configure_structlog(environment="production")  # JSON output
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from conditioning_studio.config.studio_config import StudioConfig
from conditioning_studio.infrastructure.observability.correlation import (
    correlation_id_processor,
)

# Environment variable for log level (default: INFO)
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def _get_log_level() -> int:
    """Get the configured log level from environment."""
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)
    return level if isinstance(level, int) else logging.INFO


def build_processors(environment: str) -> list[Processor]:
    """Build the processor chain for an environment.

    Args:
        environment: "production" for JSON, anything else for console.

    Returns:
        Ordered structlog processors, renderer last.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
    ]
    if environment == "production":
        # Tracebacks (listener_failed) become a string field in JSON
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors += [
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    return processors


def configure_structlog(environment: str | None = None) -> None:
    """Configure structlog for the host process.

    Args:
        environment: "production" (JSON) or "development" (console).
            Defaults to STUDIO_LOG_ENVIRONMENT via StudioConfig.
    """
    if environment is None:
        environment = StudioConfig.from_environment().log_environment

    structlog.configure(
        processors=build_processors(environment),
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger_for_session(session_id: str, component: str = "session") -> structlog.BoundLogger:
    """Get a logger with session_id and component already bound.

    Hosts use this for their own log lines about a session so they line
    up with the engine's events.
    """
    return structlog.get_logger().bind(session_id=session_id, component=component)
