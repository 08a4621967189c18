"""Utilities for validating engine configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from .engine_config import (
    ConfigurationError,
    DeductionRates,
    EngineConfiguration,
    RankingConfig,
    ReferenceSourceConfig,
    load_engine_configuration,
    resolve_data_path,
)


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_rates(scope: str, rates: DeductionRates) -> list[str]:
    errors: list[str] = []

    for label, value in {
        "national_pension_rate": rates.national_pension_rate,
        "health_insurance_rate": rates.health_insurance_rate,
        "long_term_care_ratio": rates.long_term_care_ratio,
        "employment_insurance_rate": rates.employment_insurance_rate,
        "local_income_tax_ratio": rates.local_income_tax_ratio,
        "base_tax_rate": rates.base_tax_rate,
    }.items():
        if value < 0 or value > 1:
            errors.append(
                _format_scope(scope, f"{label} {value} must be between 0 and 1")
            )

    thresholds = [bracket.threshold for bracket in rates.brackets]
    duplicates = [value for value, count in Counter(thresholds).items() if count > 1]
    if duplicates:
        errors.append(
            _format_scope(
                f"{scope}.brackets",
                f"duplicate bracket thresholds detected: {sorted(duplicates)}",
            )
        )

    previous_rate = rates.base_tax_rate
    for bracket in reversed(rates.brackets):
        if bracket.rate > 1:
            errors.append(
                _format_scope(
                    f"{scope}.brackets",
                    f"rate {bracket.rate} above {bracket.threshold:,.0f} exceeds 1",
                )
            )
        if bracket.rate < previous_rate:
            errors.append(
                _format_scope(
                    f"{scope}.brackets",
                    f"rate above {bracket.threshold:,.0f} is lower than the bracket below it",
                )
            )
        previous_rate = bracket.rate

    return errors


def _validate_ranking(scope: str, ranking: RankingConfig) -> list[str]:
    errors: list[str] = []

    percentiles = [tier.percentile for tier in ranking.tiers]
    if percentiles != sorted(percentiles):
        errors.append(
            _format_scope(
                f"{scope}.tiers",
                "percentiles should not decrease as thresholds increase",
            )
        )

    ids = [bracket.id for bracket in ranking.age_brackets]
    duplicates = [value for value, count in Counter(ids).items() if count > 1]
    if duplicates:
        errors.append(
            _format_scope(
                f"{scope}.age_brackets",
                f"duplicate age bracket identifiers detected: {sorted(duplicates)}",
            )
        )

    return errors


def _validate_reference(scope: str, reference: ReferenceSourceConfig) -> list[str]:
    errors: list[str] = []

    for label, value in {
        "percentile_csv": reference.percentile_csv,
        "averages_json": reference.averages_json,
    }.items():
        path = resolve_data_path(value)
        if path is not None and not Path(path).exists():
            errors.append(_format_scope(scope, f"{label} file not found: {value}"))

    if reference.label_field is not None and reference.label_field == reference.salary_field:
        errors.append(
            _format_scope(scope, "label and salary columns must be different")
        )

    return errors


def validate_engine_configuration(config: EngineConfiguration) -> list[str]:
    """Return a list of validation issues detected for ``config``."""

    errors: list[str] = []

    errors.extend(_validate_rates("deductions", config.deductions))
    errors.extend(_validate_ranking("ranking", config.ranking))
    errors.extend(_validate_reference("reference", config.reference))

    return errors


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate the net pay engine configuration and report issues."
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only print detected issues",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = load_engine_configuration()
    except (FileNotFoundError, ConfigurationError, ValidationError) as error:
        print(f"failed to load configuration: {error}")
        return 1

    issues = validate_engine_configuration(config)
    if issues:
        print(f"{len(issues)} issue(s) detected:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    if not args.quiet:
        print("OK")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
