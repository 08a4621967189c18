"""Pydantic models describing the engine configuration schema."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class IncomeTaxBracket(ImmutableModel):
    """Flat-rate bracket selected when the tax base exceeds ``threshold``."""

    threshold: float = Field(alias="above")
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> Self:
        if self.rate < 0:
            raise ConfigurationError("Tax rates must be non-negative")
        if self.threshold < 0:
            raise ConfigurationError("Bracket thresholds must be non-negative")
        return self


class DeductionRates(ImmutableModel):
    """Statutory rates applied to the gross monthly salary."""

    national_pension_rate: float = 0.045
    health_insurance_rate: float = 0.03545
    long_term_care_ratio: float = 0.1281
    employment_insurance_rate: float = 0.009
    local_income_tax_ratio: float = 0.1
    dependent_deduction: float = 150_000
    base_tax_rate: float = 0.06
    brackets: tuple[IncomeTaxBracket, ...] = Field(
        default=(
            IncomeTaxBracket(above=8_000_000, rate=0.20),
            IncomeTaxBracket(above=4_000_000, rate=0.15),
            IncomeTaxBracket(above=1_500_000, rate=0.10),
        )
    )

    @field_validator("brackets", mode="after")
    @classmethod
    def _order_brackets(
        cls, value: Sequence[IncomeTaxBracket]
    ) -> tuple[IncomeTaxBracket, ...]:
        # Bracket selection is a first-match scan from the highest threshold.
        return tuple(sorted(value, key=lambda bracket: bracket.threshold, reverse=True))

    @model_validator(mode="after")
    def _validate_rates(self) -> Self:
        for name in (
            "national_pension_rate",
            "health_insurance_rate",
            "long_term_care_ratio",
            "employment_insurance_rate",
            "local_income_tax_ratio",
            "base_tax_rate",
        ):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"'{name}' must be non-negative")
        if self.dependent_deduction < 0:
            raise ConfigurationError("Dependent deduction must be non-negative")
        return self

    def rate_for_tax_base(self, tax_base: float) -> float:
        """Return the flat income tax rate for ``tax_base``."""

        for bracket in self.brackets:
            if tax_base > bracket.threshold:
                return bracket.rate
        return self.base_tax_rate


class PercentileTier(ImmutableModel):
    """Threshold/rank pair used to bucket an amount into a ranking."""

    threshold: float
    percentile: float

    @model_validator(mode="after")
    def _validate_values(self) -> Self:
        if self.threshold < 0:
            raise ConfigurationError("Tier thresholds must be non-negative")
        if not 0 <= self.percentile <= 100:
            raise ConfigurationError("Tier percentiles must fall between 0 and 100")
        return self


class AgeBracket(ImmutableModel):
    """Age bracket scaling the static tier thresholds."""

    id: str
    label: str
    multiplier: float

    @model_validator(mode="after")
    def _validate_multiplier(self) -> Self:
        if self.multiplier <= 0:
            raise ConfigurationError("Age bracket multipliers must be positive")
        return self


class RankingConfig(ImmutableModel):
    """Static percentile tiers and the age-bracket multipliers applied to them."""

    tiers: tuple[PercentileTier, ...]
    age_brackets: tuple[AgeBracket, ...] = Field(default_factory=tuple)

    @field_validator("tiers", mode="after")
    @classmethod
    def _sort_tiers(cls, value: Sequence[PercentileTier]) -> tuple[PercentileTier, ...]:
        if not value:
            raise ConfigurationError("At least one percentile tier is required")
        # ``sorted`` is stable so equal thresholds keep their declared order.
        return tuple(sorted(value, key=lambda tier: tier.threshold))

    @property
    def multipliers(self) -> Mapping[str, float]:
        return {bracket.id: bracket.multiplier for bracket in self.age_brackets}

    def get_age_bracket(self, bracket_id: str) -> AgeBracket:
        for bracket in self.age_brackets:
            if bracket.id == bracket_id:
                return bracket
        raise KeyError(bracket_id)


class SolverConfig(ImmutableModel):
    """Parameters for the gross-from-net bisection search."""

    minimum_upper_bound: float = 1_000_000
    initial_multiplier: float = 2.0
    growth_factor: float = 1.6
    max_expansions: int = 40
    iterations: int = 50

    @model_validator(mode="after")
    def _validate_values(self) -> Self:
        if self.minimum_upper_bound <= 0:
            raise ConfigurationError("Solver minimum upper bound must be positive")
        if self.initial_multiplier <= 0:
            raise ConfigurationError("Solver initial multiplier must be positive")
        if self.growth_factor <= 1:
            raise ConfigurationError("Solver growth factor must exceed 1")
        if self.max_expansions < 0 or self.iterations <= 0:
            raise ConfigurationError("Solver iteration counts must be positive")
        return self


class ReferenceSourceConfig(ImmutableModel):
    """Default locations and column names for externally supplied datasets."""

    percentile_csv: str | None = None
    averages_json: str | None = None
    label_field: str | None = None
    salary_field: str = "total_salary"


class EngineConfiguration(ImmutableModel):
    """Top-level configuration for the net pay engine."""

    currency: str = "KRW"
    deductions: DeductionRates = Field(default_factory=DeductionRates)
    ranking: RankingConfig
    solver: SolverConfig = Field(default_factory=SolverConfig)
    reference: ReferenceSourceConfig = Field(default_factory=ReferenceSourceConfig)
    meta: Mapping[str, Any] = Field(default_factory=dict)


__all__ = [
    "AgeBracket",
    "ConfigurationError",
    "DeductionRates",
    "EngineConfiguration",
    "ImmutableModel",
    "IncomeTaxBracket",
    "PercentileTier",
    "RankingConfig",
    "ReferenceSourceConfig",
    "SolverConfig",
]
