"""Infrastructure layer - host-facing adapters for Conditioning Studio.

Currently provides observability (structlog configuration and
correlation IDs).
"""
