"""Display strings for calculation responses (ko-KR only)."""

from __future__ import annotations

from typing import Final

from .calculators.utils import format_percentage

DEDUCTION_LABELS: Final = {
    "national_pension": "국민연금",
    "health_insurance": "건강보험",
    "long_term_care_insurance": "장기요양보험",
    "employment_insurance": "고용보험",
    "income_tax": "소득세",
    "local_income_tax": "지방소득세",
}

AVERAGE_LABELS: Final = {
    "overall": "전체 평균",
    "region": "지역 평균",
    "gender": "성별 평균",
    "gender_age": "성별·연령대 평균",
}

NO_DATA_LABEL: Final = "데이터 없음"


def describe_top_percent(top_percent: float) -> str:
    return f"상위 {format_percentage(top_percent)}"


def describe_outside_range(max_label: float) -> str:
    return f"상위 {format_percentage(max_label)} 밖"


def describe_ratio(ratio: float) -> str:
    return f"평균 대비 {ratio:.1f}%"


__all__ = [
    "AVERAGE_LABELS",
    "DEDUCTION_LABELS",
    "NO_DATA_LABEL",
    "describe_outside_range",
    "describe_ratio",
    "describe_top_percent",
]
