"""Expose engine configuration consumed by the front-end forms.

Rates, brackets and age brackets come straight from the YAML configuration
so UI selectors never duplicate business rules.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from krnetpay.backend.config.engine_config import (
    DeductionRates,
    EngineConfiguration,
    RankingConfig,
    load_engine_configuration,
)
from krnetpay.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the engine configuration."""

    config = load_engine_configuration()
    return {
        "version": get_project_version(),
        "currency": config.currency,
        "basis_year": config.meta.get("basis_year"),
    }


def _serialise_deductions(rates: DeductionRates) -> dict[str, Any]:
    return {
        "national_pension_rate": rates.national_pension_rate,
        "health_insurance_rate": rates.health_insurance_rate,
        "long_term_care_ratio": rates.long_term_care_ratio,
        "employment_insurance_rate": rates.employment_insurance_rate,
        "local_income_tax_ratio": rates.local_income_tax_ratio,
        "dependent_deduction": rates.dependent_deduction,
        "brackets": [
            {"above": bracket.threshold, "rate": bracket.rate}
            for bracket in rates.brackets
        ]
        + [{"above": 0, "rate": rates.base_tax_rate}],
    }


def _serialise_ranking(ranking: RankingConfig) -> dict[str, Any]:
    return {
        "tiers": [
            {"threshold": tier.threshold, "percentile": tier.percentile}
            for tier in ranking.tiers
        ],
        "age_brackets": [
            {"id": bracket.id, "label": bracket.label, "multiplier": bracket.multiplier}
            for bracket in ranking.age_brackets
        ],
    }


def serialise_engine_configuration(config: EngineConfiguration) -> dict[str, Any]:
    return {
        "currency": config.currency,
        "deductions": _serialise_deductions(config.deductions),
        "ranking": _serialise_ranking(config.ranking),
        "solver": config.solver.model_dump(mode="json"),
    }


@blueprint.get("/meta")
def get_meta():
    """Return application metadata such as the packaged version."""

    return jsonify(get_configuration_metadata()), 200


@blueprint.get("/engine")
def get_engine_configuration():
    """Return the deduction rates, brackets and ranking tables in use."""

    return jsonify(serialise_engine_configuration(load_engine_configuration())), 200
