"""Tests for the Query accumulator."""

from __future__ import annotations

import pytest

from rdfquery.exceptions import (
    QueryTypeError,
    StateError,
    UnsupportedFeatureError,
)
from rdfquery.generators import QueryLanguage
from rdfquery.query import MappingResolver, Query, select
from rdfquery.terms import Literal, URIResource, Variable

EX = "http://example.org/"
S, O = Variable("s"), Variable("o")
KNOWS = URIResource(EX + "knows")


class FakeAdapter:
    """Records submitted queries and returns canned rows."""

    def __init__(self, rows, language=QueryLanguage.NATIVE):
        self.rows = rows
        self.query_language = language
        self.submitted = []

    def query(self, query):
        self.submitted.append(query)
        return self.rows


class TestAccumulation:
    def test_binding_variables_append(self):
        q = Query()
        q.add_binding_variables(S)
        q.add_binding_variables(O)
        assert q.bindings == [S, O]

    def test_binding_variables_must_be_variables(self):
        with pytest.raises(QueryTypeError):
            Query().add_binding_variables("s")

    def test_order_by_overwrites(self):
        q = Query()
        q.order_by(S)
        q.order_by(S, descending=False)
        assert q.order == {S: False}

    def test_binding_triple_is_replaced(self):
        q = Query()
        q.add_binding_triple(S, KNOWS, O)
        q.add_binding_triple(O, KNOWS, S)
        assert q.binding_triple.subject == O

    def test_condition_coerces_plain_objects(self):
        q = Query().add_condition(S, KNOWS, "alice")
        assert q.conditions[0].object == Literal("alice")

    def test_keyword_and_distinct_flags(self):
        q = Query().activate_keyword_search().set_distinct()
        assert q.keyword_search and q.distinct


class TestCountingVariable:
    def test_counting_adds_binding(self):
        q = Query().add_counting_variable(S)
        assert q.counting is True
        assert q.bindings == [S]

    def test_counting_several_variables_is_a_type_error(self):
        with pytest.raises(TypeError):
            Query().add_counting_variable([S, O])

    def test_counting_non_variable_is_a_type_error(self):
        with pytest.raises(QueryTypeError):
            Query().add_counting_variable(KNOWS)


class TestPredicateResolution:
    def test_symbolic_predicate_is_resolved(self):
        q = Query(MappingResolver({"knows": EX + "knows"}))
        q.add_condition(S, "knows", O)
        assert q.conditions[0].predicate == KNOWS

    def test_unresolved_symbol_stays_opaque(self):
        q = Query(MappingResolver({"knows": KNOWS}))
        q.add_condition(S, "likes", O)
        assert q.conditions[0].predicate == Variable("likes")

    def test_resource_predicates_are_untouched(self):
        q = Query(MappingResolver({}))
        q.add_condition(S, KNOWS, O)
        assert q.conditions[0].predicate == KNOWS


class TestGenerate:
    def test_conflict_is_detected_at_generation(self):
        q = Query().add_binding_variables(S).add_binding_triple(S, KNOWS, O)
        with pytest.raises(StateError):
            q.generate("native")

    def test_unknown_language(self):
        with pytest.raises(UnsupportedFeatureError):
            select(S).generate("cypher")

    def test_n3_is_an_alias_for_native(self):
        q = select(S).add_condition(S, KNOWS, O)
        assert q.generate("n3") == q.generate(QueryLanguage.NATIVE)


class TestExecute:
    def test_execute_returns_rows_and_clears(self):
        rows = [[URIResource(EX + "a")]]
        adapter = FakeAdapter(rows, QueryLanguage.SPARQL)
        q = select(S).add_condition(S, KNOWS, O)

        assert q.execute(adapter) == rows
        assert "SELECT ?s" in adapter.submitted[0]
        assert q.bindings == [] and q.conditions == []

    def test_counting_returns_distinct_row_count(self):
        a, b = URIResource(EX + "a"), URIResource(EX + "b")
        adapter = FakeAdapter([[a], [b], [a], [None]])
        q = Query().add_counting_variable(S).add_condition(S, KNOWS, O)

        assert q.execute(adapter) == 3
        assert q.counting is False

    def test_generation_error_happens_before_submission(self):
        adapter = FakeAdapter([], QueryLanguage.SPARQL)
        q = Query().add_counting_variable(S)

        with pytest.raises(UnsupportedFeatureError):
            q.execute(adapter)
        assert adapter.submitted == []
        # the accumulator is left intact for inspection
        assert q.counting is True
