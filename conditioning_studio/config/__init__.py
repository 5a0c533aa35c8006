"""Configuration module for Conditioning Studio.

Available Configurations:
- StudioConfig: Default preset and log environment
"""

from conditioning_studio.config.studio_config import (
    DEFAULT_STUDIO_CONFIG,
    TEST_STUDIO_CONFIG,
    StudioConfig,
)

__all__ = [
    "StudioConfig",
    "DEFAULT_STUDIO_CONFIG",
    "TEST_STUDIO_CONFIG",
]
