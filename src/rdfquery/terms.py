"""RDF node model shared by the query builder, generators and decoders.

Terms are small immutable value objects.  They know how to render
themselves in N-Triples/SPARQL syntax and can be converted to and from
:mod:`rdflib` terms, which is what the embedded store works with.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, Union

import rdflib
from rdflib.term import Identifier
from rdflib.util import from_n3

__all__ = [
    "BlankNode",
    "Literal",
    "Node",
    "Term",
    "TriplePattern",
    "URIResource",
    "Variable",
    "as_term",
    "from_rdflib",
    "parse_term",
    "to_rdflib",
]


def _escape(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


@dataclass(frozen=True)
class Variable:
    """An unbound query slot, identified by name."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Variable name must not be empty")
        if self.name.startswith("?"):
            object.__setattr__(self, "name", self.name[1:])

    def n3(self) -> str:
        return f"?{self.name}"

    def __str__(self) -> str:
        return self.n3()


@dataclass(frozen=True)
class URIResource:
    """A resource identified by a URI."""

    uri: str

    def n3(self) -> str:
        return f"<{self.uri}>"

    def __str__(self) -> str:
        return self.uri


@dataclass(frozen=True)
class Literal:
    """A literal value with an optional datatype or language tag."""

    value: str
    datatype: Optional[str] = None
    lang: Optional[str] = None

    def __post_init__(self) -> None:
        if self.datatype and self.lang:
            raise ValueError("A literal cannot have both a datatype and a language")

    def n3(self) -> str:
        quoted = f'"{_escape(self.value)}"'
        if self.datatype:
            return f"{quoted}^^<{self.datatype}>"
        if self.lang:
            return f"{quoted}@{self.lang}"
        return quoted

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BlankNode:
    """An anonymous node. Never materialized from query results."""

    id: Optional[str] = None

    def n3(self) -> str:
        return f"_:{self.id or 'b0'}"


Term = Union[Variable, URIResource, Literal, BlankNode]

# A decoded result value; blank nodes come back as ``None``.
Node = Optional[Union[URIResource, Literal]]


class TriplePattern(NamedTuple):
    """A subject/predicate/object template."""

    subject: Term
    predicate: Term
    object: Term

    def n3(self) -> str:
        return f"{self.subject.n3()} {self.predicate.n3()} {self.object.n3()}"


def as_term(value: Any) -> Term:
    """Coerce *value* to a term; plain Python values become literals."""
    if isinstance(value, (Variable, URIResource, Literal, BlankNode)):
        return value
    if isinstance(value, Identifier):
        return from_rdflib(value)
    if isinstance(value, (str, int, float, bool)):
        return Literal(str(value))
    raise TypeError(f"Cannot use {value!r} as an RDF term")


def to_rdflib(term: Term) -> Identifier:
    """Convert a term to its :mod:`rdflib` counterpart."""
    if isinstance(term, URIResource):
        return rdflib.URIRef(term.uri)
    if isinstance(term, Literal):
        datatype = rdflib.URIRef(term.datatype) if term.datatype else None
        return rdflib.Literal(term.value, datatype=datatype, lang=term.lang)
    if isinstance(term, Variable):
        return rdflib.term.Variable(term.name)
    if isinstance(term, BlankNode):
        return rdflib.BNode(term.id) if term.id else rdflib.BNode()
    raise TypeError(f"Not an RDF term: {term!r}")


def from_rdflib(node: Identifier) -> Term:
    """Convert an :mod:`rdflib` term to a term of this module."""
    if isinstance(node, rdflib.URIRef):
        return URIResource(str(node))
    if isinstance(node, rdflib.Literal):
        datatype = str(node.datatype) if node.datatype else None
        return Literal(str(node), datatype=datatype, lang=node.language)
    if isinstance(node, rdflib.BNode):
        return BlankNode(str(node))
    if isinstance(node, rdflib.term.Variable):
        return Variable(str(node))
    raise TypeError(f"Unsupported rdflib term: {node!r}")


def parse_term(text: str) -> Union[Term, str]:
    """Parse a term written in N3 notation.

    ``?x``, ``<uri>``, ``"literal"`` (with optional ``@lang`` or
    ``^^<datatype>``) and ``_:id`` are recognised.  Anything else is
    returned unchanged as a symbolic name.
    """
    text = text.strip()
    if text.startswith("?"):
        return Variable(text)
    if text.startswith(("<", '"', "_:")):
        try:
            return from_rdflib(from_n3(text))
        except Exception as exc:
            raise ValueError(f"Cannot parse term {text!r}: {exc}") from exc
    return text
