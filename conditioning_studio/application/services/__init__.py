"""Application services for Conditioning Studio."""

from conditioning_studio.application.services.export_service import (
    SessionExport,
    build_session_export,
)
from conditioning_studio.application.services.session_service import (
    Session,
    create_session,
)
from conditioning_studio.application.services.subscription_registry import (
    SubscriptionRegistry,
)

__all__: list[str] = [
    "Session",
    "SessionExport",
    "SubscriptionRegistry",
    "build_session_export",
    "create_session",
]
