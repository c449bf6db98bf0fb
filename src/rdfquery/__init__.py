"""rdfquery: abstract triple-pattern queries over heterogeneous RDF backends.

Main modules:
- terms: RDF node model (variables, URIs, literals, blank nodes)
- query: Query accumulator that generates and executes queries
- generators: SPARQL and native (N3-QL) query generators
- adapters: HTTP backends and result decoding
- store: embedded SQLite triple store
- suggest: co-occurrence based predicate suggestions
"""

from .adapters import BackendDescriptor, HttpAdapter, ResultFormat
from .exceptions import (
    BackendUnavailableError,
    QueryTypeError,
    RdfQueryError,
    ResultDecodeError,
    StateError,
    UnsupportedFeatureError,
)
from .generators import QueryLanguage
from .query import MappingResolver, PredicateResolver, Query
from .store import LocalStore
from .suggest import Suggestion, SuggestionEngine
from .terms import BlankNode, Literal, TriplePattern, URIResource, Variable
from .version import VERSION

__all__ = [
    "VERSION",
    "BackendDescriptor",
    "BackendUnavailableError",
    "BlankNode",
    "HttpAdapter",
    "Literal",
    "LocalStore",
    "MappingResolver",
    "PredicateResolver",
    "Query",
    "QueryLanguage",
    "QueryTypeError",
    "RdfQueryError",
    "ResultDecodeError",
    "ResultFormat",
    "StateError",
    "Suggestion",
    "SuggestionEngine",
    "TriplePattern",
    "URIResource",
    "UnsupportedFeatureError",
    "Variable",
]
