"""Configuration loaded from environment variables."""

from __future__ import annotations

import os

from rdfquery.adapters import BackendDescriptor, Engine, ResultFormat
from rdfquery.generators import QueryLanguage


class Config:
    """Default configuration for adapters, the CLI and the Flask backend."""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-key-change-in-prod")
    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"

    # Default remote backend
    ENDPOINT = os.getenv("RDFQUERY_ENDPOINT", "")
    QUERY_LANGUAGE = os.getenv("RDFQUERY_QUERY_LANGUAGE", "sparql")
    RESULT_FORMAT = os.getenv("RDFQUERY_RESULT_FORMAT", "json")
    STRIP_DISTINCT = os.getenv("RDFQUERY_STRIP_DISTINCT", "0") == "1"
    ENGINE = os.getenv("RDFQUERY_ENGINE", "")

    # Seconds; empty means no timeout. Validated when a descriptor is built.
    TIMEOUT = os.getenv("RDFQUERY_TIMEOUT", "")

    # SQLite path of the local store
    STORE_PATH = os.getenv("RDFQUERY_STORE_PATH", ":memory:")

    @classmethod
    def descriptor(cls, endpoint: str | None = None) -> BackendDescriptor:
        """Build the :class:`BackendDescriptor` for *endpoint* (or ``ENDPOINT``)."""
        return BackendDescriptor(
            endpoint=endpoint or cls.ENDPOINT,
            query_language=QueryLanguage(cls.QUERY_LANGUAGE),
            result_format=ResultFormat(cls.RESULT_FORMAT),
            strip_distinct_keyword=cls.STRIP_DISTINCT,
            engine=Engine(cls.ENGINE) if cls.ENGINE else None,
            timeout=cls.TIMEOUT.strip() or None,
        )


class TestConfig(Config):
    """Configuration overrides for testing."""

    TESTING = True
    ENDPOINT = "http://example.org/sparql"
    QUERY_LANGUAGE = "sparql"
    RESULT_FORMAT = "json"
    STRIP_DISTINCT = False
    ENGINE = ""
    TIMEOUT = ""
    STORE_PATH = ":memory:"
