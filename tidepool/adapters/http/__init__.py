"""HTTP adapters."""

from tidepool.adapters.http.fake import FakeBackend, json_response, text_response
from tidepool.adapters.http.transport import HttpTransport

__all__ = ["HttpTransport", "FakeBackend", "json_response", "text_response"]
