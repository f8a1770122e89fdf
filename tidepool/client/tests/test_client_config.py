"""Unit tests for client configuration and environment settings."""

import math

import pytest

from tidepool.client.config import TidepoolConfig, validate_config
from tidepool.core.config import Settings, settings
from tidepool.core.exceptions import ValidationError


def _config(**overrides) -> TidepoolConfig:
    values = {
        "query_url": "http://query.test",
        "ingest_url": "http://ingest.test",
        "timeout_ms": 1000,
        "default_namespace": "default",
    }
    values.update(overrides)
    return TidepoolConfig(**values)


# ===========================================================================
# Settings
# ===========================================================================


def test_settings_read_prefixed_env(monkeypatch):
    monkeypatch.setenv("TIDEPOOL_QUERY_URL", "http://query.internal:9000")
    monkeypatch.setenv("TIDEPOOL_TIMEOUT_MS", "5000")
    monkeypatch.setenv("TIDEPOOL_NAMESPACE", "tenant_a")

    loaded = Settings()

    assert loaded.QUERY_URL == "http://query.internal:9000"
    assert loaded.TIMEOUT_MS == 5000
    assert loaded.NAMESPACE == "tenant_a"


def test_config_defaults_come_from_settings():
    config = TidepoolConfig()

    assert config == TidepoolConfig.from_settings()
    assert config.query_url == settings.QUERY_URL
    assert config.default_namespace == settings.NAMESPACE


# ===========================================================================
# validate_config()
# ===========================================================================


def test_valid_config_is_trimmed():
    config = validate_config(
        _config(query_url=" http://query.test ", default_namespace=" tenant_a ")
    )

    assert config.query_url == "http://query.test"
    assert config.default_namespace == "tenant_a"


@pytest.mark.parametrize("field_name", ["query_url", "ingest_url"])
@pytest.mark.parametrize("value", ["", "   ", None])
def test_blank_urls_are_rejected(field_name, value):
    with pytest.raises(ValidationError, match=f"{field_name} must be a non-empty string"):
        validate_config(_config(**{field_name: value}))


@pytest.mark.parametrize("value", [0, -1, math.nan, math.inf, "1000", True])
def test_bad_timeouts_are_rejected(value):
    with pytest.raises(ValidationError, match="timeout_ms must be a positive number"):
        validate_config(_config(timeout_ms=value))


def test_fractional_timeout_is_allowed():
    assert validate_config(_config(timeout_ms=0.5)).timeout_ms == 0.5


def test_blank_default_namespace_is_rejected():
    with pytest.raises(ValidationError, match="default_namespace must be a non-empty string"):
        validate_config(_config(default_namespace="  "))


def test_config_is_immutable():
    config = _config()

    with pytest.raises(AttributeError):
        config.timeout_ms = 5


def test_timeout_too_large_for_a_float_is_rejected():
    with pytest.raises(ValidationError, match="timeout_ms must be a positive number"):
        validate_config(_config(timeout_ms=10**400))
