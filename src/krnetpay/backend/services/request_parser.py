"""Helpers for normalising incoming JSON requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest

_SELECTION_PARAMS = ("age_bracket", "region", "gender", "gender_age_bracket")


def _merge_query_selections(req: Request, payload: dict[str, Any]) -> None:
    """Fill selector values from query parameters the body leaves out."""

    selections = payload.get("selections")
    if selections is None:
        selections = {}
    elif not isinstance(selections, Mapping):
        return
    merged = dict(selections)

    for name in _SELECTION_PARAMS:
        value = req.args.get(name)
        if value and name not in merged:
            merged[name] = value

    if merged:
        payload["selections"] = merged


def parse_json_payload(req: Request) -> dict[str, Any]:
    """Extract a JSON object from ``req`` and merge selector query parameters."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    payload = dict(data)
    _merge_query_selections(req, payload)

    return payload
