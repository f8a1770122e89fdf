"""Logging for the Tidepool client.

Usage:
    from tidepool.core.logging import logger

    log = logger.with_context(namespace="products").with_prefix("[query] ")
    log.debug("Sending request")

The package logger carries a NullHandler; applications decide where records go.
"""

import logging
from typing import Any, MutableMapping, Optional

_ROOT_LOGGER_NAME = "tidepool"


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that attaches structured context and an optional prefix.

    Context fields are passed to handlers through ``extra`` so formatters can
    render them; the prefix is prepended to every message.
    """

    def __init__(
        self,
        logger: logging.Logger,
        context: Optional[dict[str, Any]] = None,
        prefix: str = "",
    ):
        """Create a new ContextualLogger.

        Args:
            logger: The stdlib logger records are emitted on.
            context: Structured fields attached to every record.
            prefix: Text prepended to every message.
        """
        super().__init__(logger, dict(context or {}))
        self.prefix = prefix

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        """Merge bound context into ``extra`` and apply the prefix."""
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        if self.prefix:
            msg = f"{self.prefix}{msg}"
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextualLogger":
        """Return a new logger with additional context fields."""
        merged = {**(self.extra or {}), **context}
        return ContextualLogger(self.logger, merged, self.prefix)

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a new logger with ``prefix`` appended to the current prefix."""
        return ContextualLogger(self.logger, dict(self.extra or {}), f"{self.prefix}{prefix}")


def get_logger(name: Optional[str] = None) -> ContextualLogger:
    """Return a ContextualLogger for ``tidepool`` or one of its children."""
    full_name = _ROOT_LOGGER_NAME if not name else f"{_ROOT_LOGGER_NAME}.{name}"
    return ContextualLogger(logging.getLogger(full_name))


logging.getLogger(_ROOT_LOGGER_NAME).addHandler(logging.NullHandler())

logger = get_logger()
