"""Orchestrate request validation, net pay calculation and comparisons.

The calculation service turns a raw payload into a validated request, runs
the deduction calculator (through the inverse solver in target-net mode) and
assembles the comparison block against the static tier table and whichever
reference snapshot the caller supplies. Everything here is a pure function
of its arguments; the reference snapshot is read, never modified.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from krnetpay.backend.app.models import (
    MODE_TARGET_NET,
    CalculationRequest,
    CalculationResponse,
    ComparisonRequest,
    ComparisonSelections,
    Comparisons,
    ReferenceSnapshot,
    format_validation_error,
)
from krnetpay.backend.config.engine_config import (
    EngineConfiguration,
    load_engine_configuration,
)

from .calculators import (
    DeductionBreakdown,
    TierRanking,
    compute_net,
    format_won,
    rank_by_age_adjusted_tier,
    rank_by_empirical_tier,
    rank_by_static_tier,
    ratio_to_average,
    round_currency,
    round_rate,
    solve_gross_for_target_net,
)
from .calculators.ranking import NO_DATA, OUTSIDE_RANGE, RANKED
from .labels import (
    AVERAGE_LABELS,
    DEDUCTION_LABELS,
    NO_DATA_LABEL,
    describe_outside_range,
    describe_ratio,
    describe_top_percent,
)

_LOGGER = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

_EMPTY_SNAPSHOT = ReferenceSnapshot()


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("KRNETPAY_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _validate(payload: Mapping[str, Any] | BaseModel, model: type[_ModelT]) -> _ModelT:
    if isinstance(payload, model):
        data: Any = payload.model_dump(mode="python")
    elif isinstance(payload, Mapping):
        data = payload
    else:
        raise ValueError("Payload must be a mapping")

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def _serialise_tier(ranking: TierRanking) -> dict[str, Any]:
    return {
        "percentile": ranking.percentile,
        "top_percent": ranking.top_percent,
        "threshold": ranking.threshold,
        "description": describe_top_percent(ranking.top_percent),
    }


def _serialise_average(key: str, amount: float, reference: float | None) -> dict[str, Any]:
    comparison = ratio_to_average(amount, reference)
    if comparison.status == NO_DATA:
        description = NO_DATA_LABEL
    else:
        description = describe_ratio(comparison.ratio or 0.0)
    return {
        "key": key,
        "label": AVERAGE_LABELS[key],
        "status": comparison.status,
        "ratio": comparison.ratio,
        "reference": comparison.reference,
        "description": description,
    }


def build_comparisons(
    amount: float,
    selections: ComparisonSelections,
    snapshot: ReferenceSnapshot | None,
    config: EngineConfiguration,
) -> dict[str, Any]:
    """Rank and compare the annual ``amount`` for the current selections.

    Called afresh whenever the amount or any selector changes.
    """

    snapshot = snapshot or _EMPTY_SNAPSHOT
    ranking = config.ranking

    comparisons: dict[str, Any] = {
        "amount": round_currency(amount),
        "static": _serialise_tier(rank_by_static_tier(amount, ranking.tiers)),
    }

    age_label: str | None = None
    if selections.age_bracket:
        try:
            bracket = ranking.get_age_bracket(selections.age_bracket)
        except KeyError as exc:
            raise ValueError(f"Unknown age bracket '{selections.age_bracket}'") from exc
        age_label = bracket.label
        adjusted = rank_by_age_adjusted_tier(
            amount, ranking.tiers, bracket.id, ranking.multipliers
        )
        entry = _serialise_tier(adjusted)
        entry["age_bracket"] = bracket.id
        entry["multiplier"] = bracket.multiplier
        comparisons["age_adjusted"] = entry

    empirical = rank_by_empirical_tier(amount, snapshot.percentiles)
    if empirical.status == RANKED:
        description = describe_top_percent(empirical.percentile or 0.0)
    elif empirical.status == OUTSIDE_RANGE:
        description = describe_outside_range(empirical.max_label or 0.0)
    else:
        description = NO_DATA_LABEL
    comparisons["empirical"] = {
        "status": empirical.status,
        "percentile": empirical.percentile,
        "threshold": empirical.threshold,
        "max_label": empirical.max_label,
        "description": description,
    }

    averages = snapshot.averages
    entries = [
        _serialise_average("overall", amount, averages.overall if averages else None)
    ]
    if selections.region:
        entries.append(
            _serialise_average(
                "region", amount, averages.region(selections.region) if averages else None
            )
        )
    if selections.gender:
        entries.append(
            _serialise_average(
                "gender", amount, averages.gender(selections.gender) if averages else None
            )
        )
        gender_age_bracket = selections.gender_age_bracket or age_label
        if gender_age_bracket:
            reference = (
                averages.gender_age(selections.gender, gender_age_bracket)
                if averages
                else None
            )
            entries.append(_serialise_average("gender_age", amount, reference))
    comparisons["averages"] = entries

    return Comparisons.model_validate(comparisons).model_dump(mode="json", exclude_none=True)


def _build_summary(
    request: CalculationRequest, breakdown: DeductionBreakdown
) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "mode": request.mode,
        "gross_monthly": round_currency(breakdown.gross_monthly),
        "gross_annual": round_currency(breakdown.gross_annual),
        "net_monthly": round_currency(breakdown.net_monthly),
        "net_annual": round_currency(breakdown.net_annual),
        "total_deductions": round_currency(breakdown.total_deductions),
        "social_insurance": round_currency(breakdown.social_insurance),
        "tax_base": round_currency(breakdown.tax_base),
        "tax_rate": round_rate(breakdown.tax_rate),
        "dependent_deduction": round_currency(breakdown.dependent_deduction),
        "formatted": {
            "gross_monthly": format_won(breakdown.gross_monthly),
            "gross_annual": format_won(breakdown.gross_annual),
            "net_monthly": format_won(breakdown.net_monthly),
            "net_annual": format_won(breakdown.net_annual),
            "total_deductions": format_won(breakdown.total_deductions),
        },
    }
    if request.target_net_monthly is not None:
        summary["target_net_monthly"] = round_currency(request.target_net_monthly)
    return summary


def calculate_salary(
    payload: Mapping[str, Any] | CalculationRequest,
    reference: ReferenceSnapshot | None = None,
    config: EngineConfiguration | None = None,
) -> dict[str, Any]:
    """Compute net pay, itemised deductions and comparisons for ``payload``."""

    request = _validate(payload, CalculationRequest)
    config = config or load_engine_configuration()

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("gross", timings):
        if request.mode == MODE_TARGET_NET:
            gross_monthly = solve_gross_for_target_net(
                request.target_net_monthly or 0.0,
                request.dependents,
                rates=config.deductions,
                solver=config.solver,
            )
        else:
            gross_monthly = (request.gross_annual or 0.0) / 12

    with _profile_section("deductions", timings):
        breakdown = compute_net(gross_monthly, request.dependents, config.deductions)

    with _profile_section("comparisons", timings):
        comparisons = build_comparisons(
            breakdown.gross_annual, request.selections, reference, config
        )

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_salary timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    deductions = [
        {
            "type": key,
            "label": DEDUCTION_LABELS[key],
            "amount": round_currency(amount),
            "formatted": format_won(amount),
        }
        for key, amount in breakdown.items().items()
    ]

    response_model = CalculationResponse.model_validate(
        {
            "summary": _build_summary(request, breakdown),
            "deductions": deductions,
            "comparisons": comparisons,
            "meta": {
                "currency": config.currency,
                "dependents": request.dependents,
                "reference_loaded": bool(reference and reference.is_loaded),
            },
        }
    )

    return response_model.model_dump(mode="json", exclude_none=True)


def compare_salary(
    payload: Mapping[str, Any] | ComparisonRequest,
    reference: ReferenceSnapshot | None = None,
    config: EngineConfiguration | None = None,
) -> dict[str, Any]:
    """Recompute only the comparison block for an annual amount."""

    request = _validate(payload, ComparisonRequest)
    config = config or load_engine_configuration()
    return build_comparisons(request.gross_annual, request.selections, reference, config)


__all__ = ["build_comparisons", "calculate_salary", "compare_salary"]
