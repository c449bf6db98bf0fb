"""Decode backend result encodings into rows of RDF nodes.

Every decoder produces rows aligned to the projected variables, in
projection order.  Values are classified the same way whatever the
encoding:

* URIs become :class:`~rdfquery.terms.URIResource`
* literals (plain or typed) become :class:`~rdfquery.terms.Literal`
* blank nodes and unbound variables become ``None``
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Union

import rdflib

from rdfquery.exceptions import ResultDecodeError
from rdfquery.terms import Literal, Node, URIResource

logger = logging.getLogger(__name__)

__all__ = [
    "create_node",
    "decode_json",
    "decode_native_row",
    "iter_xml",
]

ResultRow = List[Node]

SPARQL_RESULTS_ROOT = "{http://www.w3.org/2005/sparql-results#}sparql"
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"


def create_node(
    type_: str,
    value: str,
    datatype: Optional[str] = None,
    lang: Optional[str] = None,
) -> Node:
    """Create the node for one bound value of the given result *type_*."""
    if type_ == "uri":
        return URIResource(value)
    if type_ in ("literal", "typed-literal"):
        # a literal cannot carry both; the datatype wins
        return Literal(value, datatype=datatype, lang=None if datatype else lang)
    if type_ == "bnode":
        return None
    raise ValueError(f"unknown result value type {type_!r}")


# ── JSON ──────────────────────────────────────────────────────────


def decode_json(
    payload: Union[str, bytes, Dict[str, Any]],
    endpoint: str = "",
) -> List[ResultRow]:
    """Decode a SPARQL JSON results document.

    Args:
        payload: Response body, or the already parsed JSON object.
        endpoint: Endpoint identity used in error messages.

    Returns:
        One row per binding, values in ``head.vars`` order.

    Raises:
        ResultDecodeError: If the body is not a SPARQL JSON result.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ResultDecodeError(endpoint, f"invalid JSON: {exc}") from exc
    if payload is None:
        return []

    try:
        variables: Sequence[str] = payload["head"]["vars"]
        bindings: Sequence[Dict[str, Any]] = payload["results"]["bindings"]
    except (KeyError, TypeError) as exc:
        raise ResultDecodeError(endpoint, f"missing key in JSON result: {exc}") from exc

    rows: List[ResultRow] = []
    for binding in bindings:
        if not isinstance(binding, dict):
            raise ResultDecodeError(endpoint, f"binding is not an object: {binding!r}")
        row: ResultRow = []
        for var in variables:
            cell = binding.get(var)
            if cell is None:
                row.append(None)
                continue
            if not isinstance(cell, dict):
                raise ResultDecodeError(endpoint, f"bad binding for ?{var}: {cell!r}")
            try:
                row.append(
                    create_node(
                        cell["type"],
                        cell["value"],
                        datatype=cell.get("datatype"),
                        lang=cell.get("xml:lang"),
                    )
                )
            except (KeyError, ValueError) as exc:
                raise ResultDecodeError(endpoint, f"bad binding for ?{var}: {exc}") from exc
        rows.append(row)
    return rows


# ── XML (streaming) ───────────────────────────────────────────────


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def iter_xml(chunks: Iterable[bytes], endpoint: str = "") -> Iterator[ResultRow]:
    """Incrementally decode a SPARQL XML results stream.

    The document is fed to a pull parser chunk by chunk, and each
    ``<result>`` element is dropped from the tree once its row has been
    yielded, so memory use does not grow with the number of results.

    Args:
        chunks: Byte chunks of the response body, in order.
        endpoint: Endpoint identity used in error messages.

    Yields:
        One row per ``<result>`` element, in document order.

    Raises:
        ResultDecodeError: If the stream is not well-formed XML or its root
            is not a SPARQL results element.
    """
    parser = ET.XMLPullParser(events=("start", "end"))
    variables: List[str] = []
    results_elem: Optional[ET.Element] = None
    root_seen = False

    def drain() -> Iterator[ResultRow]:
        nonlocal results_elem, root_seen
        for event, elem in parser.read_events():
            name = _local(elem.tag)
            if event == "start":
                if not root_seen:
                    if elem.tag != SPARQL_RESULTS_ROOT:
                        raise ResultDecodeError(
                            endpoint, f"not a SPARQL results document: <{elem.tag}>",
                        )
                    root_seen = True
                if name == "results":
                    results_elem = elem
                continue
            if name == "variable":
                variables.append(elem.get("name", ""))
            elif name == "result":
                yield _xml_row(elem, variables, endpoint)
                if results_elem is not None:
                    results_elem.remove(elem)
                else:
                    elem.clear()

    try:
        for chunk in chunks:
            if not chunk:
                continue
            parser.feed(chunk)
            yield from drain()
        parser.close()
        yield from drain()
    except ET.ParseError as exc:
        raise ResultDecodeError(endpoint, f"invalid XML: {exc}") from exc


def _xml_row(elem: ET.Element, variables: Sequence[str], endpoint: str) -> ResultRow:
    values: Dict[str, Node] = {}
    for binding in elem:
        if _local(binding.tag) != "binding" or len(binding) == 0:
            continue
        value_elem = binding[0]
        type_ = _local(value_elem.tag)
        try:
            values[binding.get("name", "")] = create_node(
                type_,
                value_elem.text or "",
                datatype=value_elem.get("datatype"),
                lang=value_elem.get(XML_LANG),
            )
        except ValueError as exc:
            raise ResultDecodeError(endpoint, str(exc)) from exc
    return [values.get(var) for var in variables]


# ── Native rows ───────────────────────────────────────────────────


def decode_native_row(row: Iterable[Any]) -> ResultRow:
    """Classify a row of :mod:`rdflib` terms from the embedded store."""
    decoded: ResultRow = []
    for value in row:
        if isinstance(value, rdflib.URIRef):
            decoded.append(URIResource(str(value)))
        elif isinstance(value, rdflib.Literal):
            datatype = str(value.datatype) if value.datatype else None
            decoded.append(Literal(str(value), datatype=datatype, lang=value.language))
        else:
            # BNode or unbound
            decoded.append(None)
    return decoded
