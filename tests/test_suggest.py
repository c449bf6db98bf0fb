"""Tests for the predicate suggestion engine."""

from __future__ import annotations

import pytest

from rdfquery.store import LocalStore
from rdfquery.suggest import Suggestion, SuggestionEngine
from rdfquery.terms import Literal, URIResource

EX = "http://example.org/"


def uri(name: str) -> URIResource:
    return URIResource(EX + name)


S1, S2, S3, S4 = uri("s1"), uri("s2"), uri("s3"), uri("s4")
P1, P2, P3, P4 = uri("p1"), uri("p2"), uri("p3"), uri("p4")


@pytest.fixture
def store():
    s = LocalStore()
    s.add_many([
        (S1, P1, Literal("o1")),
        (S1, P2, Literal("o2")),
        (S2, P1, Literal("o3")),
        (S2, P2, Literal("o4")),
        (S3, P3, Literal("o5")),
    ])
    yield s
    s.close()


@pytest.fixture
def engine(store):
    return SuggestionEngine(store)


def test_occurrence_filters_singletons(engine):
    assert engine.occurrence_stats() == {P1: 2, P2: 2}
    assert engine.occurrence(P3) == 0


def test_cooccurrence_is_symmetric_without_self_pairs(engine):
    stats = engine.cooccurrence_stats()
    assert stats == {(P1, P2): 2, (P2, P1): 2}
    assert engine.cooccurrence(P1, P1) == 0


def test_suggests_cooccurring_predicate(store, engine):
    store.add(S4, P1, Literal("o6"))

    suggestions = engine.suggest(S4)
    assert suggestions == [Suggestion(P2, pytest.approx(2 / 3))]


def test_suggest_for_predicate_set(engine):
    # p1 is used by s1 and s2, both of which also use p2
    assert engine.suggest_for({P1}) == [Suggestion(P2, 1.0)]


def test_low_support_predicates_do_not_filter(store, engine):
    resource = uri("r")
    store.add_many([(resource, P1, Literal("x")), (resource, P4, Literal("y"))])

    # p4 is used once and is ignored; p1 now has support 3
    assert engine.suggest(resource) == [Suggestion(P2, pytest.approx(2 / 3))]


def test_own_predicates_are_not_suggested(engine):
    assert engine.suggest(S1) == []


def test_no_qualifying_predicates(engine):
    assert engine.suggest(S3) == []
    assert engine.suggest(uri("unknown")) == []


def test_candidates_must_cooccur_with_every_qualifying_predicate(store, engine):
    store.add_many([
        (S3, P4, Literal("a")),
        (S4, P3, Literal("b")),
        (S4, P4, Literal("c")),
        (S1, P3, Literal("d")),
    ])
    resource = uri("r")
    store.add_many([(resource, P1, Literal("x")), (resource, P3, Literal("y"))])

    predicates = {s.predicate for s in engine.suggest(resource)}
    # p2 co-occurs with p1 and p3 (via s1); p4 only with p3
    assert predicates == {P2}


def test_statistics_follow_store_writes(store, engine):
    assert engine.occurrence(P3) == 0
    store.add(S4, P3, Literal("again"))
    assert engine.occurrence(P3) == 2
