"""Fixtures for backend tests."""

from __future__ import annotations

import pytest

from rdfquery.backend.app import create_app
from rdfquery.config import TestConfig
from rdfquery.terms import Literal, URIResource

EX = "http://example.org/"


@pytest.fixture()
def app():
    """Create a test Flask application."""
    application = create_app(TestConfig)
    yield application
    application.config["STORE"].close()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def store(app):
    """Direct access to the LocalStore instance, filled with a few people."""
    s = app.config["STORE"]
    name, age = URIResource(EX + "name"), URIResource(EX + "age")
    s.add_many([
        (URIResource(EX + "alice"), name, Literal("Alice")),
        (URIResource(EX + "alice"), age, 30),
        (URIResource(EX + "bob"), name, Literal("Bob")),
        (URIResource(EX + "bob"), age, 25),
        (URIResource(EX + "carol"), name, Literal("Carol")),
    ])
    return s
