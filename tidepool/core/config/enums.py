"""Configuration enums for type-safe settings.

These enums inherit from str to maintain JSON serialization compatibility.
"""

from enum import Enum


class Service(str, Enum):
    """Backend services the client talks to.

    The query service is read-only; the ingest service owns writes and maintenance.
    """

    QUERY = "query"
    INGEST = "ingest"
