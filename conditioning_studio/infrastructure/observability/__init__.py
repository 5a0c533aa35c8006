"""Observability infrastructure: structured logging and correlation IDs.

Usage:
    from conditioning_studio.infrastructure.observability import (
        configure_structlog,
        correlation_scope,
    )

    # At startup
    configure_structlog(environment="production")

    # Around one host action
    with correlation_scope():
        session.dispatch("summary.continued")
"""

from conditioning_studio.infrastructure.observability.correlation import (
    correlation_id_processor,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from conditioning_studio.infrastructure.observability.logging import (
    build_processors,
    configure_structlog,
    get_logger_for_session,
)

__all__: list[str] = [
    "build_processors",
    "configure_structlog",
    "correlation_id_processor",
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger_for_session",
    "set_correlation_id",
]
