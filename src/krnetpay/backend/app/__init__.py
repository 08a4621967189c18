"""Application factory for krnetpay backend services."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any
from warnings import warn

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest

from krnetpay.backend.config.engine_config import load_engine_configuration, resolve_data_path

from .http import REFERENCE_EXTENSION, problem_response
from .routes import register_routes
from .routes.config import get_configuration_metadata
from .services.reference_data import ReferenceDataStore

_LOGGER = logging.getLogger(__name__)


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _reference_sources() -> dict[str, Any]:
    """Resolve reference data locations from the environment or the bundled defaults."""

    reference = load_engine_configuration().reference

    def _path(env_name: str, default: str | None) -> Path | None:
        override = os.getenv(env_name)
        if override is not None:
            return Path(override) if override.strip() else None
        return resolve_data_path(default)

    return {
        "percentile_csv": _path("KRNETPAY_PERCENTILE_CSV", reference.percentile_csv),
        "averages_json": _path("KRNETPAY_AVERAGES_JSON", reference.averages_json),
        "label_field": reference.label_field,
        "salary_field": reference.salary_field,
    }


def create_app(reference_store: ReferenceDataStore | None = None) -> Flask:
    """Create and configure the Flask application instance.

    Without an explicit ``reference_store`` a fresh store is created and the
    reference datasets are loaded in the background; requests served before
    that load finishes report missing reference data.
    """

    app = Flask(__name__)

    allowed_origins = _parse_allowed_origins(os.getenv("KRNETPAY_ALLOWED_ORIGINS"))

    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST"],
        allow_headers=["Content-Type"],
    )

    sources = _reference_sources()
    app.config["REFERENCE_SOURCES"] = sources

    if reference_store is None:
        reference_store = ReferenceDataStore()
        if _env_flag("KRNETPAY_DISABLE_REFERENCE_AUTOLOAD"):
            _LOGGER.info("Reference data autoload disabled")
        else:
            reference_store.load_in_background(
                sources["percentile_csv"],
                sources["averages_json"],
                label_field=sources["label_field"],
                salary_field=sources["salary_field"],
            )
    app.extensions[REFERENCE_EXTENSION] = reference_store

    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        snapshot = reference_store.snapshot()
        payload = {
            "status": "ok",
            **get_configuration_metadata(),
            "reference_loaded": snapshot.is_loaded,
        }
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Surface rejected salary input as a validation problem."""

        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()

    return app
