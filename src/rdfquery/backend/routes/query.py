"""Structured query routes: /api/query/*."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, abort, current_app, jsonify, request

from rdfquery.adapters import HttpAdapter
from rdfquery.query import MappingResolver, Query
from rdfquery.terms import Variable, parse_term

query_bp = Blueprint("query", __name__)


def _variable(name: Any) -> Variable:
    if not isinstance(name, str) or not name:
        abort(400, description=f"Invalid variable name: {name!r}")
    return Variable(name)


def _term(text: Any):
    if not isinstance(text, str):
        abort(400, description=f"Terms must be strings in N3 notation, got {text!r}")
    try:
        return parse_term(text)
    except ValueError as exc:
        abort(400, description=str(exc))


def build_query(data: dict[str, Any]) -> Query:
    """Populate a :class:`Query` from a JSON request body."""
    for key, kind in (("select", list), ("where", list), ("order", dict), ("predicates", dict)):
        if key in data and not isinstance(data[key], kind):
            abort(400, description=f"'{key}' must be a JSON {'array' if kind is list else 'object'}")

    predicates = data.get("predicates")
    q = Query(MappingResolver(predicates) if predicates else None)

    q.add_binding_variables(*(_variable(v) for v in data.get("select", [])))
    if data.get("count"):
        q.add_counting_variable(_variable(data["count"]))

    for pattern in data.get("where", []):
        if not isinstance(pattern, list) or len(pattern) != 3:
            abort(400, description="Each 'where' entry must be [subject, predicate, object]")
        s, p, o = (_term(t) for t in pattern)
        q.add_condition(s, p, o)

    for name, direction in data.get("order", {}).items():
        q.order_by(_variable(name), descending=str(direction).lower() != "asc")

    if data.get("distinct"):
        q.set_distinct()
    if data.get("keyword"):
        q.activate_keyword_search()
    return q


@query_bp.route("/", methods=["POST"])
def run_query():
    """Build, generate and execute a structured query.

    Runs against ``endpoint`` when given, otherwise against the
    application's local store.
    """
    data = request.get_json(force=True)
    if not isinstance(data, dict):
        abort(400, description="Request body must be a JSON object")
    if not data.get("select") and not data.get("count"):
        return jsonify({"error": "Missing 'select' or 'count'"}), 400

    q = build_query(data)
    endpoint = data.get("endpoint")
    if endpoint:
        adapter = HttpAdapter(current_app.config["BACKEND_CONFIG"].descriptor(endpoint))
    else:
        adapter = current_app.config["STORE"]

    counting = q.counting
    variables = [v.name for v in q.bindings]
    try:
        query_string = q.generate(adapter.query_language)
        result = q.execute(adapter)
    finally:
        if isinstance(adapter, HttpAdapter):
            adapter.close()

    if counting:
        return jsonify({"query": query_string, "count": result})

    rows = [[None if node is None else node.n3() for node in row] for row in result]
    return jsonify({
        "query": query_string,
        "variables": variables,
        "rows": rows,
        "row_count": len(rows),
    })
