"""Configuration module for the Tidepool client.

Provides environment-backed defaults with type-safe enums.

Usage:
    from tidepool.core.config import settings, Service

    if service == Service.INGEST:
        base_url = settings.INGEST_URL
"""

from tidepool.core.config.enums import Service
from tidepool.core.config.settings import Settings

__all__ = [
    "Settings",
    "Service",
    "settings",
]

# Singleton settings instance
settings = Settings()
