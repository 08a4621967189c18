"""Unit tests for JSON request parsing helpers."""

from __future__ import annotations

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from krnetpay.backend.services.request_parser import parse_json_payload


def test_parse_payload_merges_query_selections(app: Flask) -> None:
    """Selector query parameters should fill in missing selections."""

    with app.test_request_context(
        "/api/v1/calculations",
        query_string={"region": "서울", "gender": "여성"},
        method="POST",
        json={"gross_annual": 36_000_000},
    ):
        payload = parse_json_payload(request)

    assert payload["selections"] == {"region": "서울", "gender": "여성"}


def test_parse_payload_prefers_body_selections(app: Flask) -> None:
    """Explicit body selections should not be overridden by the query string."""

    with app.test_request_context(
        "/api/v1/calculations",
        query_string={"region": "부산", "age_bracket": "30s"},
        method="POST",
        json={"gross_annual": 36_000_000, "selections": {"region": "서울"}},
    ):
        payload = parse_json_payload(request)

    assert payload["selections"] == {"region": "서울", "age_bracket": "30s"}


def test_parse_payload_ignores_unrelated_query_parameters(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations",
        query_string={"debug": "1"},
        method="POST",
        json={"gross_annual": 36_000_000},
    ):
        payload = parse_json_payload(request)

    assert payload == {"gross_annual": 36_000_000}


def test_parse_payload_rejects_non_object(app: Flask) -> None:
    """Non-object JSON payloads should trigger BadRequest responses."""

    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        json=["not", "an", "object"],
    ):
        with pytest.raises(BadRequest):
            parse_json_payload(request)


def test_parse_payload_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        data="{broken",
        content_type="application/json",
    ):
        with pytest.raises(BadRequest) as excinfo:
            parse_json_payload(request)

    assert excinfo.value.description == "Request body must be valid JSON"
