"""Unit tests for the calculation orchestration service."""

from __future__ import annotations

import logging

import pytest

from krnetpay.backend.app.models import ComparisonSelections, ReferenceSnapshot
from krnetpay.backend.app.services.calculation_service import (
    build_comparisons,
    calculate_salary,
    compare_salary,
)
from krnetpay.backend.config.engine_config import load_engine_configuration

SELECTIONS = {"age_bracket": "20s", "region": "서울", "gender": "여성"}


def test_gross_mode_returns_summary_and_itemised_deductions(
    reference_snapshot: ReferenceSnapshot,
) -> None:
    result = calculate_salary({"gross_annual": 36_000_000}, reference_snapshot)

    summary = result["summary"]
    assert summary["mode"] == "gross"
    assert summary["gross_monthly"] == pytest.approx(3_000_000)
    assert summary["net_monthly"] == pytest.approx(2_417_545.07)
    assert summary["tax_rate"] == pytest.approx(0.1)
    assert summary["formatted"]["net_monthly"] == "2,417,545 원"
    assert summary["formatted"]["net_annual"] == "29,010,541 원"
    assert "target_net_monthly" not in summary

    deductions = {item["type"]: item for item in result["deductions"]}
    assert list(deductions) == [
        "national_pension",
        "health_insurance",
        "long_term_care_insurance",
        "employment_insurance",
        "income_tax",
        "local_income_tax",
    ]
    assert deductions["national_pension"]["label"] == "국민연금"
    assert deductions["national_pension"]["formatted"] == "135,000 원"
    assert deductions["long_term_care_insurance"]["amount"] == pytest.approx(13_623.44)

    assert result["meta"] == {"currency": "KRW", "dependents": 1, "reference_loaded": True}


def test_deductions_and_net_add_up_to_gross(reference_snapshot: ReferenceSnapshot) -> None:
    result = calculate_salary(
        {"gross_annual": "84,000,000", "dependents": 3}, reference_snapshot
    )

    total = sum(item["amount"] for item in result["deductions"])
    summary = result["summary"]
    assert total == pytest.approx(summary["total_deductions"], abs=0.05)
    assert summary["net_monthly"] + total == pytest.approx(summary["gross_monthly"], abs=0.05)


def test_target_mode_solves_for_gross(reference_snapshot: ReferenceSnapshot) -> None:
    result = calculate_salary(
        {"target_net_monthly": 2_417_545.065, "dependents": 1}, reference_snapshot
    )

    summary = result["summary"]
    assert summary["mode"] == "target_net"
    assert summary["target_net_monthly"] == pytest.approx(2_417_545.07, abs=0.01)
    assert summary["gross_monthly"] == pytest.approx(3_000_000, abs=1)
    assert summary["net_monthly"] >= summary["target_net_monthly"] - 0.01
    assert summary["net_monthly"] - summary["target_net_monthly"] <= 1


def test_comparisons_cover_every_selected_reference(
    reference_snapshot: ReferenceSnapshot,
) -> None:
    result = calculate_salary(
        {"gross_annual": 36_000_000, "selections": SELECTIONS}, reference_snapshot
    )

    comparisons = result["comparisons"]
    assert comparisons["amount"] == pytest.approx(36_000_000)
    assert comparisons["static"]["percentile"] == 45
    assert comparisons["static"]["description"] == "상위 55%"
    assert comparisons["age_adjusted"]["percentile"] == 74
    assert comparisons["age_adjusted"]["top_percent"] == pytest.approx(26)
    assert comparisons["age_adjusted"]["multiplier"] == pytest.approx(0.7)
    assert comparisons["empirical"]["status"] == "ranked"
    assert comparisons["empirical"]["percentile"] == 60
    assert comparisons["empirical"]["description"] == "상위 60%"

    averages = {entry["key"]: entry for entry in comparisons["averages"]}
    assert averages["overall"]["ratio"] == pytest.approx(80.5)
    assert averages["region"]["ratio"] == pytest.approx(72.2)
    assert averages["gender"]["ratio"] == pytest.approx(107.9)
    assert averages["gender_age"]["ratio"] == pytest.approx(128.8)
    assert averages["gender_age"]["description"] == "평균 대비 128.8%"


def test_explicit_gender_age_bracket_overrides_age_label(
    reference_snapshot: ReferenceSnapshot,
) -> None:
    selections = {**SELECTIONS, "gender_age_bracket": "30대"}

    result = compare_salary(
        {"gross_annual": 39_150_000, "selections": selections}, reference_snapshot
    )

    averages = {entry["key"]: entry for entry in result["averages"]}
    assert averages["gender_age"]["ratio"] == pytest.approx(100.0)


def test_only_overall_average_without_selections(
    reference_snapshot: ReferenceSnapshot,
) -> None:
    result = compare_salary({"gross_annual": 50_000_000}, reference_snapshot)

    assert [entry["key"] for entry in result["averages"]] == ["overall"]
    assert "age_adjusted" not in result


def test_missing_reference_data_reports_no_data() -> None:
    result = calculate_salary({"gross_annual": 36_000_000, "selections": SELECTIONS})

    comparisons = result["comparisons"]
    assert comparisons["static"]["percentile"] == 45
    assert comparisons["empirical"] == {"status": "no_data", "description": "데이터 없음"}
    assert {entry["status"] for entry in comparisons["averages"]} == {"no_data"}
    assert result["meta"]["reference_loaded"] is False


def test_unknown_region_reports_no_data(reference_snapshot: ReferenceSnapshot) -> None:
    result = compare_salary(
        {"gross_annual": 36_000_000, "selections": {"region": "제주"}}, reference_snapshot
    )

    region = next(entry for entry in result["averages"] if entry["key"] == "region")
    assert region["status"] == "no_data"
    assert "ratio" not in region


def test_amount_below_every_empirical_threshold_is_outside_range(
    reference_snapshot: ReferenceSnapshot,
) -> None:
    result = compare_salary({"gross_annual": 6_000_000}, reference_snapshot)

    empirical = result["empirical"]
    assert empirical["status"] == "outside_range"
    assert empirical["max_label"] == 90
    assert empirical["description"] == "상위 90% 밖"
    assert result["static"]["percentile"] == 0
    assert result["static"]["description"] == "상위 100%"


def test_build_comparisons_uses_supplied_configuration(
    reference_snapshot: ReferenceSnapshot,
) -> None:
    config = load_engine_configuration()

    result = build_comparisons(
        250_000_000, ComparisonSelections(age_bracket="60s"), reference_snapshot, config
    )

    assert result["static"]["percentile"] == 99
    assert result["age_adjusted"]["age_bracket"] == "60s"
    assert result["empirical"]["percentile"] == 5


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({}, "exactly one"),
        ({"gross_annual": 1, "target_net_monthly": 1}, "exactly one"),
        ({"gross_annual": -5}, "value must be positive"),
        ({"gross_annual": "abc"}, "gross_annual"),
        ({"gross_annual": "inf"}, "gross_annual"),
        ({"gross_annual": float("nan")}, "gross_annual"),
        ({"target_net_monthly": "Infinity"}, "target_net_monthly"),
        ({"gross_annual": 1_000_000, "dependents": 0}, "dependents"),
        ({"gross_annual": 1_000_000, "bonus": 5}, "bonus"),
    ],
)
def test_invalid_payloads_raise_value_errors(payload: dict, message: str) -> None:
    with pytest.raises(ValueError) as excinfo:
        calculate_salary(payload)

    assert str(excinfo.value).startswith("Invalid salary input: ")
    assert message in str(excinfo.value)


def test_unknown_age_bracket_is_rejected(reference_snapshot: ReferenceSnapshot) -> None:
    with pytest.raises(ValueError) as excinfo:
        compare_salary(
            {"gross_annual": 36_000_000, "selections": {"age_bracket": "teens"}},
            reference_snapshot,
        )

    assert "Unknown age bracket 'teens'" in str(excinfo.value)


def test_non_mapping_payload_is_rejected() -> None:
    with pytest.raises(ValueError):
        calculate_salary(["gross_annual", 1])  # type: ignore[arg-type]


def test_profiling_logs_timings(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("KRNETPAY_PROFILE_CALCULATIONS", "true")

    with caplog.at_level(
        logging.DEBUG, logger="krnetpay.backend.app.services.calculation_service"
    ):
        calculate_salary({"gross_annual": 36_000_000})

    assert "calculate_salary timings" in caplog.text
