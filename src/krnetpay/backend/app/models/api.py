"""Pydantic models describing the public API surface."""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

__all__ = [
    "AverageComparisonEntry",
    "CalculationRequest",
    "CalculationResponse",
    "ComparisonRequest",
    "ComparisonSelections",
    "Comparisons",
    "DeductionEntry",
    "EmpiricalRankingEntry",
    "MODE_GROSS",
    "MODE_TARGET_NET",
    "ResponseMeta",
    "Summary",
    "TierRankingEntry",
    "format_validation_error",
]

MODE_GROSS = "gross"
MODE_TARGET_NET = "target_net"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ComparisonSelections(BaseModel):
    """Selector values that choose which reference figures to compare against."""

    model_config = ConfigDict(extra="forbid")

    age_bracket: str | None = None
    region: str | None = None
    gender: str | None = None
    gender_age_bracket: str | None = None

    @field_validator(
        "age_bracket", "region", "gender", "gender_age_bracket", mode="before"
    )
    @classmethod
    def _strip_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)


class CalculationRequest(BaseModel):
    """Salary input in either gross or target-net mode."""

    model_config = ConfigDict(extra="forbid")

    gross_annual: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    target_net_monthly: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    dependents: int = Field(default=1, ge=1, le=20)
    selections: ComparisonSelections = Field(default_factory=ComparisonSelections)

    @field_validator("gross_annual", "target_net_monthly", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if isinstance(value, str):
            return value.replace(",", "")
        return value

    @field_validator("dependents", mode="before")
    @classmethod
    def _default_dependents(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        return 1 if value is None else value

    @field_validator("selections", mode="before")
    @classmethod
    def _default_selections(cls, value: Any) -> Any:
        return {} if value is None else value

    @model_validator(mode="after")
    def _require_single_mode(self) -> "CalculationRequest":
        has_gross = self.gross_annual is not None
        has_target = self.target_net_monthly is not None
        if has_gross == has_target:
            raise ValueError(
                "Provide exactly one of 'gross_annual' or 'target_net_monthly'"
            )
        return self

    @property
    def mode(self) -> str:
        return MODE_GROSS if self.gross_annual is not None else MODE_TARGET_NET


class ComparisonRequest(BaseModel):
    """Recompute comparisons for an annual amount and the current selections."""

    model_config = ConfigDict(extra="forbid")

    gross_annual: float = Field(gt=0, allow_inf_nan=False)
    selections: ComparisonSelections = Field(default_factory=ComparisonSelections)

    @field_validator("selections", mode="before")
    @classmethod
    def _default_selections(cls, value: Any) -> Any:
        return {} if value is None else value


class DeductionEntry(BaseModel):
    """Single payslip deduction."""

    model_config = ConfigDict(extra="forbid")

    type: str
    label: str
    amount: float
    formatted: str


class Summary(BaseModel):
    """Headline figures of a calculation."""

    model_config = ConfigDict(extra="forbid")

    mode: str
    gross_monthly: float
    gross_annual: float
    net_monthly: float
    net_annual: float
    total_deductions: float
    social_insurance: float
    tax_base: float
    tax_rate: float
    dependent_deduction: float
    target_net_monthly: float | None = None
    formatted: dict[str, str]


class TierRankingEntry(BaseModel):
    """Ranking against the static (optionally age-adjusted) tier table."""

    model_config = ConfigDict(extra="forbid")

    percentile: float
    top_percent: float
    threshold: float | None = None
    description: str
    age_bracket: str | None = None
    multiplier: float | None = None


class EmpiricalRankingEntry(BaseModel):
    """Ranking against the externally loaded percentile table."""

    model_config = ConfigDict(extra="forbid")

    status: str
    percentile: float | None = None
    threshold: float | None = None
    max_label: float | None = None
    description: str


class AverageComparisonEntry(BaseModel):
    """Ratio of the salary to one reference average."""

    model_config = ConfigDict(extra="forbid")

    key: str
    label: str
    status: str
    ratio: float | None = None
    reference: float | None = None
    description: str


class Comparisons(BaseModel):
    """All contextual rankings for an annual salary."""

    model_config = ConfigDict(extra="forbid")

    amount: float
    static: TierRankingEntry
    age_adjusted: TierRankingEntry | None = None
    empirical: EmpiricalRankingEntry
    averages: list[AverageComparisonEntry]


class ResponseMeta(BaseModel):
    """Metadata describing how the calculation was performed."""

    model_config = ConfigDict(extra="forbid")

    currency: str
    dependents: int
    reference_loaded: bool


class CalculationResponse(BaseModel):
    """Complete response payload for a calculation."""

    model_config = ConfigDict(extra="forbid")

    summary: Summary
    deductions: list[DeductionEntry]
    comparisons: Comparisons
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than 0" in message.lower():
            message = "value must be positive"
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid salary input: {details}"
