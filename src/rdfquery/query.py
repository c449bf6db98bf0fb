"""Query model accumulator.

A :class:`Query` collects the pieces of one pending query (projected
variables or a binding triple, triple-pattern conditions, ordering and
flags), then generates a query string for a backend and executes it.
It is single-use: the accumulator is emptied as soon as the query has
been generated for execution.

Usage:
    from rdfquery import Query, URIResource, Variable

    s, name = Variable("s"), Variable("name")
    q = Query()
    q.add_binding_variables(s, name)
    q.add_condition(s, URIResource("http://xmlns.com/foaf/0.1/name"), name)
    q.order_by(name, descending=False)
    rows = q.execute(adapter)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

from rdfquery.exceptions import QueryTypeError, UnsupportedFeatureError
from rdfquery.generators import GENERATORS, QueryLanguage, QuerySnapshot
from rdfquery.terms import Node, Term, TriplePattern, URIResource, Variable, as_term

logger = logging.getLogger(__name__)

__all__ = [
    "MappingResolver",
    "PredicateResolver",
    "Query",
    "QueryAdapter",
    "select",
]


class PredicateResolver(Protocol):
    """Resolves short predicate names (``"title"``) to full resources."""

    def resolve(self, name: str) -> Optional[URIResource]:
        ...


class MappingResolver:
    """A :class:`PredicateResolver` backed by a plain mapping."""

    def __init__(self, predicates: Mapping[str, Union[URIResource, str]]) -> None:
        self._predicates = {
            name: p if isinstance(p, URIResource) else URIResource(p)
            for name, p in predicates.items()
        }

    def resolve(self, name: str) -> Optional[URIResource]:
        return self._predicates.get(name)


class QueryAdapter(Protocol):
    """What :meth:`Query.execute` needs from a backend."""

    query_language: QueryLanguage

    def query(self, query: str) -> List[List[Node]]:
        ...


class Query:
    """Caller-owned accumulator describing one query.

    Args:
        resolver: Optional resolver for symbolic predicate names used in
            :meth:`add_condition`.
    """

    def __init__(self, resolver: Optional[PredicateResolver] = None) -> None:
        self.resolver = resolver
        self.clear()

    def clear(self) -> None:
        """Reset every container to empty."""
        self.bindings: List[Variable] = []
        self.binding_triple: Optional[TriplePattern] = None
        self.conditions: List[TriplePattern] = []
        self.order: Dict[Variable, bool] = {}
        self.distinct = False
        self.counting = False
        self.keyword_search = False

    # -- accumulation ---------------------------------------------------

    def add_binding_variables(self, *variables: Variable) -> "Query":
        """Add variables to the projection."""
        for var in variables:
            if not isinstance(var, Variable):
                raise QueryTypeError(f"binding variables must be Variable, got {var!r}")
        self.bindings.extend(variables)
        return self

    def add_counting_variable(self, variable: Any) -> "Query":
        """Count the distinct values of a single variable.

        The count is computed client side from the distinct rows returned
        for *variable*, not as a backend aggregate.
        """
        if isinstance(variable, (list, tuple, set)):
            raise QueryTypeError("cannot count more than one variable")
        if not isinstance(variable, Variable):
            raise QueryTypeError("can only count unbound variables")
        self.counting = True
        self.bindings.append(variable)
        return self

    def add_binding_triple(self, subject: Any, predicate: Any, obj: Any) -> "Query":
        """Project a whole triple. Only one binding triple is kept."""
        self.binding_triple = TriplePattern(as_term(subject), as_term(predicate), as_term(obj))
        return self

    def add_condition(self, subject: Any, predicate: Any, obj: Any) -> "Query":
        """Add a triple pattern to the where clause."""
        logger.debug("adding condition: %s %s %s", subject, predicate, obj)
        self.conditions.append(
            TriplePattern(as_term(subject), self._convert_predicate(predicate), as_term(obj))
        )
        return self

    def order_by(self, variable: Variable, descending: bool = True) -> "Query":
        """Order results on *variable*. Ordering the same variable again replaces its direction."""
        self.order[variable] = descending
        return self

    def set_distinct(self, distinct: bool = True) -> "Query":
        self.distinct = distinct
        return self

    def activate_keyword_search(self) -> "Query":
        """Match literal objects by keyword instead of exact equality."""
        self.keyword_search = True
        return self

    def _convert_predicate(self, predicate: Any) -> Term:
        if not isinstance(predicate, str):
            return as_term(predicate)
        if self.resolver is not None:
            resolved = self.resolver.resolve(predicate)
            if resolved is not None:
                return resolved
        # Unresolved symbolic names stay opaque slots
        return Variable(predicate)

    # -- generation & execution -----------------------------------------

    def snapshot(self) -> QuerySnapshot:
        """Freeze the current state for a generator."""
        return QuerySnapshot(
            bindings=tuple(self.bindings),
            binding_triple=self.binding_triple,
            conditions=tuple(self.conditions),
            order=tuple(self.order.items()),
            distinct=self.distinct,
            counting=self.counting,
            keyword_search=self.keyword_search,
        )

    def generate(self, language: Union[QueryLanguage, str]) -> str:
        """Generate the query string for *language*."""
        try:
            language = QueryLanguage(language)
        except ValueError:
            raise UnsupportedFeatureError(f"Unknown query language: {language!r}") from None
        return GENERATORS[language](self.snapshot())

    def execute(self, adapter: QueryAdapter) -> Union[List[List[Node]], int]:
        """Generate, clear, and run the query against *adapter*.

        Returns:
            The decoded result rows, or the number of distinct rows when a
            counting variable was set.
        """
        qs = self.generate(adapter.query_language)
        counting = self.counting
        self.clear()

        rows = adapter.query(qs)
        if counting:
            return len({tuple(row) for row in rows})
        return rows

    def __repr__(self) -> str:
        return (
            f"Query(bindings={self.bindings!r}, conditions={len(self.conditions)}, "
            f"counting={self.counting})"
        )


def select(*variables: Variable, resolver: Optional[PredicateResolver] = None) -> Query:
    """Shortcut for ``Query(resolver).add_binding_variables(*variables)``."""
    return Query(resolver).add_binding_variables(*variables)

