"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from flask import current_app, jsonify

from krnetpay.backend.app.services.reference_data import ReferenceDataStore

REFERENCE_EXTENSION = "krnetpay.reference"


@dataclass(frozen=True)
class ProblemResponse:
    """Lightweight representation of an RFC 7807-style error payload."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error, "status": self.status}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Build a :class:`ProblemResponse` with optional extra members."""

    return ProblemResponse(error=error, status=status, message=message, extra=extra or None)


def current_reference_store() -> ReferenceDataStore:
    """Return the reference data store registered on the active application."""

    return current_app.extensions[REFERENCE_EXTENSION]


__all__ = [
    "ProblemResponse",
    "REFERENCE_EXTENSION",
    "current_reference_store",
    "problem_response",
]
