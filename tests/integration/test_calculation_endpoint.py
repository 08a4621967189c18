"""Integration tests for the net pay calculation REST endpoints."""

from __future__ import annotations

import json
from http import HTTPStatus
from pathlib import Path
from typing import Dict, Iterable

import pytest
from flask.testing import FlaskClient

DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


def _load_scenarios() -> Iterable[Dict[str, object]]:
    with DATA_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@pytest.mark.parametrize("scenario", _load_scenarios(), ids=lambda item: item["name"])
def test_calculation_endpoint_matches_regression_scenarios(
    client: FlaskClient, scenario: Dict[str, object]
) -> None:
    """Each regression scenario should remain stable over time."""

    response = client.post("/api/v1/calculations", json=scenario["payload"])
    assert response.status_code == HTTPStatus.OK

    result = response.get_json()
    expected = scenario["expectations"]

    summary = result["summary"]
    for key, value in expected["summary"].items():
        assert summary[key] == pytest.approx(value)

    deductions = {item["type"]: item for item in result["deductions"]}
    for deduction_type, amount in expected["deductions"].items():
        assert deduction_type in deductions, f"Missing deduction for {deduction_type}"
        assert deductions[deduction_type]["amount"] == pytest.approx(amount, abs=0.01)


def test_calculation_endpoint_solves_target_net(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"target_net_monthly": "3,943,840.525", "dependents": 2},
    )

    assert response.status_code == HTTPStatus.OK
    summary = response.get_json()["summary"]
    assert summary["mode"] == "target_net"
    assert summary["gross_monthly"] == pytest.approx(5_000_000, abs=1)
    assert summary["net_monthly"] == pytest.approx(3_943_840.53, abs=1)


def test_calculation_endpoint_reads_selections_from_query(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        query_string={"age_bracket": "20s", "region": "서울", "gender": "여성"},
        json={"gross_annual": 36_000_000},
    )

    assert response.status_code == HTTPStatus.OK
    comparisons = response.get_json()["comparisons"]
    assert comparisons["age_adjusted"]["description"] == "상위 26%"
    assert [entry["key"] for entry in comparisons["averages"]] == [
        "overall",
        "region",
        "gender",
        "gender_age",
    ]


def test_calculation_endpoint_disables_caching(client: FlaskClient) -> None:
    response = client.post("/api/v1/calculations", json={"gross_annual": 36_000_000})

    assert response.headers["Cache-Control"] == "no-store"


def test_calculation_endpoint_returns_bad_request_for_invalid_json(
    client: FlaskClient,
) -> None:
    """Invalid payloads should return a structured 400 response."""

    response = client.post(
        "/api/v1/calculations",
        data="not-json",
        content_type="text/plain",
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "bad_request"
    assert payload["status"] == 400
    assert "JSON" in payload["message"].upper()


@pytest.mark.parametrize(
    "payload",
    [
        {"gross_annual": -1},
        {"gross_annual": 36_000_000, "target_net_monthly": 2_000_000},
        {"gross_annual": 36_000_000, "dependents": 0},
        {"gross_annual": 36_000_000, "selections": {"age_bracket": "teens"}},
    ],
)
def test_calculation_endpoint_returns_validation_errors(
    client: FlaskClient, payload: Dict[str, object]
) -> None:
    """Domain validation errors should surface as 400 responses."""

    response = client.post("/api/v1/calculations", json=payload)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    body = response.get_json()
    assert body["error"] == "validation_error"
    assert body["message"]


def test_comparisons_endpoint_recomputes_rankings(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/comparisons",
        json={"gross_annual": 120_000_000, "selections": {"region": "울산"}},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["static"]["percentile"] == 94
    assert payload["empirical"]["percentile"] == 10
    region = next(entry for entry in payload["averages"] if entry["key"] == "region")
    assert region["ratio"] == pytest.approx(233.6)


def test_comparisons_endpoint_requires_positive_amount(client: FlaskClient) -> None:
    response = client.post("/api/v1/comparisons", json={"gross_annual": 0})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "validation_error"


def test_calculation_endpoint_rejects_overflowing_amounts(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        data='{"gross_annual": 1e999}',
        content_type="application/json",
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    body = response.get_json()
    assert body["error"] == "validation_error"
    assert body["message"].startswith("Invalid salary input: gross_annual")


def test_comparisons_endpoint_rejects_non_finite_amounts(client: FlaskClient) -> None:
    response = client.post("/api/v1/comparisons", json={"gross_annual": "inf"})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["message"].startswith("Invalid salary input: ")
