"""Application layer - session orchestration for Conditioning Studio.

This layer contains:
- Ports: the injected clock
- Services: the Session aggregate, subscriptions and export

CRITICAL: This layer may import from domain (and config) but not from
infrastructure.
"""
