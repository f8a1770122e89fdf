"""Environment-backed settings.

Values here are only defaults for ``TidepoolConfig``. The client validates the
resolved configuration once, at construction.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Tidepool settings with automatic env var loading.

    Env vars use the ``TIDEPOOL_`` prefix:
        TIDEPOOL_QUERY_URL=http://query.internal:8080
        TIDEPOOL_TIMEOUT_MS=5000
    """

    model_config = SettingsConfigDict(
        env_prefix="TIDEPOOL_",
        extra="ignore",
    )

    QUERY_URL: str = Field("http://localhost:8080", description="Query service base URL")
    INGEST_URL: str = Field("http://localhost:8081", description="Ingest service base URL")
    TIMEOUT_MS: float = Field(30000, description="Per-request timeout in milliseconds")
    NAMESPACE: str = Field("default", description="Namespace used when a call names none")
