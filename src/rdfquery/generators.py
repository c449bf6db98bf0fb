"""Translate a query model into backend-specific query strings.

Two target languages are supported:

* **SPARQL** – ``SELECT [DISTINCT] ?a ?b WHERE { ... } [ORDER BY ...]``
* **native** – the N3-QL triple-pattern dialect spoken by YARS-style
  stores::

      @prefix ql: <http://www.w3.org/2004/12/ql#> .
      @prefix yars: <http://sw.deri.org/2004/06/yars#> .
      <> ql:select { (?a ?b) } ;
         ql:where { ?a <http://example.org/p> ?b . } .

Generators are plain functions over an immutable :class:`QuerySnapshot`
and keep no state, so they can be called from any thread.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from rdfquery.exceptions import StateError, UnsupportedFeatureError
from rdfquery.terms import Literal, TriplePattern, URIResource, Variable

logger = logging.getLogger(__name__)

__all__ = [
    "GENERATORS",
    "QueryLanguage",
    "QuerySnapshot",
    "generate_native",
    "generate_sparql",
]

QL_NS = "http://www.w3.org/2004/12/ql#"
YARS_NS = "http://sw.deri.org/2004/06/yars#"
YARS_KEYWORD = URIResource(YARS_NS + "keyword")

_REGEX_SPECIAL = re.compile(r"([\\.*+?^$|()\[\]{}])")


class QueryLanguage(str, Enum):
    """Query languages a backend can declare."""

    SPARQL = "sparql"
    NATIVE = "native"

    @classmethod
    def _missing_(cls, value: object) -> Optional["QueryLanguage"]:
        # "n3" is what YARS deployments advertise
        if isinstance(value, str) and value.lower() in ("n3", "n3ql"):
            return cls.NATIVE
        return None


@dataclass(frozen=True)
class QuerySnapshot:
    """Immutable view of a query model, handed to a generator."""

    bindings: Tuple[Variable, ...] = ()
    binding_triple: Optional[TriplePattern] = None
    conditions: Tuple[TriplePattern, ...] = ()
    order: Tuple[Tuple[Variable, bool], ...] = ()
    distinct: bool = False
    counting: bool = False
    keyword_search: bool = False


def _is_keyword_condition(pattern: TriplePattern) -> bool:
    return isinstance(pattern.object, Literal)


# ── SPARQL ────────────────────────────────────────────────────────


def generate_sparql(model: QuerySnapshot) -> str:
    """Generate a SPARQL SELECT query.

    Raises
    ------
    UnsupportedFeatureError
        If the model uses a binding triple or counting.
    StateError
        If the model has no binding variables to project.
    """
    if model.binding_triple is not None:
        raise UnsupportedFeatureError("SPARQL doesn't support binding triple")
    if model.counting:
        raise UnsupportedFeatureError("SPARQL doesn't support counting triples")
    if not model.bindings:
        raise StateError("SPARQL query needs at least one binding variable")

    select = "SELECT DISTINCT" if model.distinct else "SELECT"
    projection = " ".join(v.n3() for v in model.bindings)

    where = []
    keyword_index = 0
    for pattern in model.conditions:
        if model.keyword_search and _is_keyword_condition(pattern):
            var = Variable(f"keyword{keyword_index}")
            keyword_index += 1
            needle = Literal(_REGEX_SPECIAL.sub(r"\\\1", pattern.object.value)).n3()
            where.append(f"  {pattern.subject.n3()} {pattern.predicate.n3()} {var.n3()} .")
            where.append(f'  FILTER regex(str({var.n3()}), {needle}, "i")')
        else:
            where.append(f"  {pattern.n3()} .")

    lines = [f"{select} {projection}", "WHERE {", *where, "}"]
    if model.order:
        keys = " ".join(
            f"DESC({v.n3()})" if descending else f"ASC({v.n3()})"
            for v, descending in model.order
        )
        lines.append(f"ORDER BY {keys}")

    query = "\n".join(lines)
    logger.debug("Generated SPARQL query:\n%s", query)
    return query


# ── Native (N3-QL) ────────────────────────────────────────────────


def generate_native(model: QuerySnapshot) -> str:
    """Generate a native triple-pattern query.

    Either ``bindings`` or ``binding_triple`` provides the projection,
    never both.
    """
    if model.bindings and model.binding_triple is not None:
        raise StateError("cannot add a binding triple with binding variables")
    if not model.bindings and model.binding_triple is None:
        raise StateError("native query needs binding variables or a binding triple")
    if model.counting and len(model.bindings) != 1:
        raise StateError("counting needs exactly one projected variable")

    head = "ql:distinct" if model.distinct else "ql:select"
    if model.binding_triple is not None:
        projection = f"{{ {model.binding_triple.n3()} . }}"
    else:
        projection = "{ (" + " ".join(v.n3() for v in model.bindings) + ") }"

    patterns = []
    for pattern in model.conditions:
        if model.keyword_search and _is_keyword_condition(pattern):
            pattern = TriplePattern(pattern.subject, YARS_KEYWORD, pattern.object)
        patterns.append(f"{pattern.n3()} .")
    where = "{ " + " ".join(patterns) + " }" if patterns else "{ }"

    clauses = [f"<> {head} {projection}", f"ql:where {where}"]
    if model.order:
        keys = " ".join(
            f'({v.n3()} "{"desc" if descending else "asc"}")'
            for v, descending in model.order
        )
        clauses.append(f"ql:orderBy {{ {keys} }}")

    query = "\n".join([
        f"@prefix ql: <{QL_NS}> .",
        f"@prefix yars: <{YARS_NS}> .",
        " ;\n   ".join(clauses) + " .",
    ])
    logger.debug("Generated native query:\n%s", query)
    return query


GENERATORS: Dict[QueryLanguage, Callable[[QuerySnapshot], str]] = {
    QueryLanguage.SPARQL: generate_sparql,
    QueryLanguage.NATIVE: generate_native,
}
