"""Tidepool client façade."""

from tidepool.client.client import TidepoolClient
from tidepool.client.config import TidepoolConfig, validate_config

__all__ = ["TidepoolClient", "TidepoolConfig", "validate_config"]
