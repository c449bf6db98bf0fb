"""Tests for the embedded SQLite triple store."""

from __future__ import annotations

import pytest
import rdflib

from rdfquery.exceptions import ResultDecodeError
from rdfquery.query import Query, select
from rdfquery.store import LocalStore
from rdfquery.terms import Literal, URIResource, Variable

EX = "http://example.org/"
ALICE, BOB = URIResource(EX + "alice"), URIResource(EX + "bob")
NAME, KNOWS = URIResource(EX + "name"), URIResource(EX + "knows")

TURTLE = f"""
@prefix ex: <{EX}> .
ex:alice ex:name "Alice" ; ex:knows ex:bob .
ex:bob ex:name "Bob" .
"""


@pytest.fixture
def store():
    s = LocalStore(":memory:")
    s.add(ALICE, NAME, Literal("Alice"))
    s.add(ALICE, KNOWS, BOB)
    s.add(BOB, NAME, Literal("Bob"))
    yield s
    s.close()


def test_size_and_duplicates(store):
    assert store.size() == 3
    store.add(ALICE, NAME, Literal("Alice"))
    assert len(store) == 3


def test_revision_moves_on_writes_only(store):
    rev = store.revision
    store.add(ALICE, NAME, Literal("Alice"))
    assert store.revision == rev
    store.add(BOB, KNOWS, ALICE)
    assert store.revision == rev + 1
    assert store.remove(BOB, KNOWS, ALICE) == 1
    assert store.revision == rev + 2


def test_triples_pattern(store):
    triples = list(store.triples(predicate=NAME))
    assert len(triples) == 2
    assert all(p == rdflib.URIRef(EX + "name") for _, p, _ in triples)


def test_direct_predicates(store):
    assert store.direct_predicates(ALICE) == {NAME, KNOWS}
    assert store.direct_predicates(URIResource(EX + "nobody")) == set()


def test_load_turtle(tmp_path):
    path = tmp_path / "people.ttl"
    path.write_text(TURTLE)
    store = LocalStore(tmp_path / "people.db")
    assert store.load(str(path), format="turtle") == 3
    assert store.size() == 3
    store.close()


def test_sparql_query_through_accumulator(store):
    s, name = Variable("s"), Variable("name")
    q = select(s, name).add_condition(s, NAME, name).order_by(name, descending=False)

    rows = q.execute(store)
    assert rows == [[ALICE, Literal("Alice")], [BOB, Literal("Bob")]]


def test_keyword_search(store):
    s = Variable("s")
    q = select(s).add_condition(s, NAME, Literal("lic")).activate_keyword_search()
    assert q.execute(store) == [[ALICE]]


def test_exact_literal_match(store):
    s = Variable("s")
    assert select(s).add_condition(s, NAME, "lic").execute(store) == []


def test_query_sees_writes(store):
    s = Variable("s")
    assert len(Query().add_binding_variables(s).add_condition(s, NAME, Variable("n")).execute(store)) == 2
    store.add(URIResource(EX + "carol"), NAME, Literal("Carol"))
    assert len(Query().add_binding_variables(s).add_condition(s, NAME, Variable("n")).execute(store)) == 3


def test_non_select_rejected(store):
    with pytest.raises(ResultDecodeError):
        store.query("ASK { ?s ?p ?o }")


def test_statistics_views(store):
    store.add(BOB, KNOWS, ALICE)
    assert dict(store.occurrence_rows()) == {NAME: 2, KNOWS: 2}
    pairs = {(p1, p2): c for p1, p2, c in store.cooccurrence_rows()}
    assert pairs == {(NAME, KNOWS): 2, (KNOWS, NAME): 2}
