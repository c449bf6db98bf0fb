"""Flask application factory for the rdfquery backend API."""

from __future__ import annotations

import logging

from flask import Flask, jsonify

from rdfquery.config import Config
from rdfquery.exceptions import BackendError, RdfQueryError
from rdfquery.store import LocalStore

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Register consistent JSON error handlers."""

    @app.errorhandler(400)
    def bad_request(exc):
        return jsonify({"error": str(exc.description)}), 400

    @app.errorhandler(404)
    def not_found(exc):
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(BackendError)
    def backend_error(exc):
        return jsonify({
            "error": "Upstream endpoint error",
            "endpoint": exc.endpoint,
            "details": str(exc),
        }), 502

    @app.errorhandler(RdfQueryError)
    def query_error(exc):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(Exception)
    def unhandled(exc):
        app.logger.exception("Unhandled exception")
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    config_class:
        Configuration class (default :class:`Config`).

    Returns
    -------
    Flask
        Configured Flask application.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config["BACKEND_CONFIG"] = config_class

    # ── Local store ───────────────────────────────────────────────────
    store = LocalStore(config_class.STORE_PATH)
    app.config["STORE"] = store
    logger.info("Serving local store %r", store)

    # ── Blueprints ────────────────────────────────────────────────────
    from rdfquery.backend.routes.query import query_bp
    from rdfquery.backend.routes.suggest import suggest_bp

    app.register_blueprint(query_bp, url_prefix="/api/query")
    app.register_blueprint(suggest_bp, url_prefix="/api/suggest")

    # ── Error handlers ────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Health check ──────────────────────────────────────────────────
    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok", "triples": store.size()})

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=True)
