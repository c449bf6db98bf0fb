"""Predicate suggestion routes: /api/suggest/*."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from rdfquery.suggest import SuggestionEngine
from rdfquery.terms import URIResource

suggest_bp = Blueprint("suggest", __name__)


def _get_engine() -> SuggestionEngine:
    engine = current_app.config.get("SUGGESTION_ENGINE")
    if engine is None:
        engine = SuggestionEngine(current_app.config["STORE"])
        current_app.config["SUGGESTION_ENGINE"] = engine
    return engine


@suggest_bp.route("/", methods=["GET"])
def suggest_predicates():
    """Return predicate suggestions for ``?resource=<uri>``, best first."""
    resource = request.args.get("resource", "")
    if not resource:
        return jsonify({"error": "Missing 'resource' parameter"}), 400

    limit = request.args.get("limit", type=int)
    suggestions = sorted(
        _get_engine().suggest(URIResource(resource)),
        key=lambda s: s.score,
        reverse=True,
    )
    if limit is not None:
        suggestions = suggestions[:limit]

    return jsonify([
        {"predicate": s.predicate.uri, "score": s.score} for s in suggestions
    ])
