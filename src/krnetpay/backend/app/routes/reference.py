"""Expose the status of the externally supplied reference datasets."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify

from krnetpay.backend.app.http import current_reference_store

blueprint = Blueprint("reference", __name__, url_prefix="/api/v1/reference")


@blueprint.get("")
def get_reference_status() -> tuple[Any, int]:
    """Return load status and the selectable regions, genders and age brackets."""

    snapshot = current_reference_store().snapshot()
    return jsonify(snapshot.describe()), 200


@blueprint.post("/reload")
def reload_reference_data() -> tuple[Any, int]:
    """Schedule a background reload; the current snapshot stays live until it finishes."""

    sources = current_app.config["REFERENCE_SOURCES"]
    current_reference_store().load_in_background(
        sources["percentile_csv"],
        sources["averages_json"],
        label_field=sources["label_field"],
        salary_field=sources["salary_field"],
    )
    return jsonify({"status": "scheduled"}), 202
