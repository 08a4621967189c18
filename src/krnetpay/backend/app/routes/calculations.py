"""REST endpoints for net pay calculations and comparisons."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from krnetpay.backend.app.http import current_reference_store
from krnetpay.backend.app.services.calculation_service import (
    calculate_salary,
    compare_salary,
)
from krnetpay.backend.services import build_json_response, parse_json_payload

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Calculate net pay from a gross salary or gross pay from a target net."""

    payload = parse_json_payload(request)
    snapshot = current_reference_store().snapshot()
    result = calculate_salary(payload, snapshot)

    return build_json_response(result)


@blueprint.post("/comparisons")
def create_comparison() -> tuple[Any, int]:
    """Re-rank an annual salary after a selector change."""

    payload = parse_json_payload(request)
    snapshot = current_reference_store().snapshot()
    result = compare_salary(payload, snapshot)

    return build_json_response(result)
