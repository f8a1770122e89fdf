"""Core: configuration, logging, exceptions, retry and response-shape helpers."""
