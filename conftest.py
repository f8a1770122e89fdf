"""Root conftest for pytest configuration.

Loaded before both testpaths (tests/ and the package's colocated tests/ folders).
"""

import os

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables: must be set before any tidepool module import
# Uses setdefault so real env vars are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("TIDEPOOL_QUERY_URL", "http://localhost:8080")
os.environ.setdefault("TIDEPOOL_INGEST_URL", "http://localhost:8081")
os.environ.setdefault("TIDEPOOL_TIMEOUT_MS", "30000")
os.environ.setdefault("TIDEPOOL_NAMESPACE", "default")
