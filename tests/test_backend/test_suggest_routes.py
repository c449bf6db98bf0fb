"""Tests for predicate suggestion routes."""

from __future__ import annotations

from rdfquery.terms import Literal, URIResource

EX = "http://example.org/"


def test_suggest_missing_resource(client):
    resp = client.get("/api/suggest/")
    assert resp.status_code == 400


def test_suggest_for_resource(client, store):
    resp = client.get("/api/suggest/", query_string={"resource": EX + "carol"})
    assert resp.status_code == 200
    (suggestion,) = resp.get_json()
    assert suggestion["predicate"] == EX + "age"
    assert abs(suggestion["score"] - 2 / 3) < 1e-9


def test_suggest_unknown_resource(client, store):
    resp = client.get("/api/suggest/", query_string={"resource": EX + "nobody"})
    assert resp.status_code == 200
    assert resp.get_json() == []


def test_suggest_sees_new_triples(client, store):
    client.get("/api/suggest/", query_string={"resource": EX + "carol"})

    knows = URIResource(EX + "knows")
    store.add(URIResource(EX + "alice"), knows, URIResource(EX + "bob"))
    store.add(URIResource(EX + "bob"), knows, URIResource(EX + "carol"))
    store.add(URIResource(EX + "dave"), URIResource(EX + "name"), Literal("Dave"))

    resp = client.get(
        "/api/suggest/", query_string={"resource": EX + "dave", "limit": 1},
    )
    data = resp.get_json()
    assert len(data) == 1
    # name: 4 subjects; age and knows each co-occur with it twice
    assert data[0]["score"] == 0.5
