"""Immutable reference datasets consumed by the ranking helpers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True, slots=True)
class EmpiricalTier:
    """Percentile label parsed from an external table and its salary threshold."""

    percentile: float
    threshold: float
    label: str = ""


class AverageReferenceSet(BaseModel):
    """Benchmark annual salaries by region, gender and gender/age bracket."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    overall: float | None = None
    regions: Mapping[str, float] = Field(default_factory=dict)
    gender_totals: Mapping[str, float] = Field(default_factory=dict, alias="genderTotals")
    by_gender_age: Mapping[str, Mapping[str, float]] = Field(
        default_factory=dict, alias="byGenderAge"
    )

    @field_validator("regions", "gender_totals", mode="after")
    @classmethod
    def _freeze_mapping(cls, value: Mapping[str, float]) -> Mapping[str, float]:
        return MappingProxyType({str(key): float(val) for key, val in value.items()})

    @field_validator("by_gender_age", mode="after")
    @classmethod
    def _freeze_nested(
        cls, value: Mapping[str, Mapping[str, float]]
    ) -> Mapping[str, Mapping[str, float]]:
        return MappingProxyType(
            {
                str(gender): MappingProxyType(
                    {str(bracket): float(amount) for bracket, amount in brackets.items()}
                )
                for gender, brackets in value.items()
            }
        )

    def region(self, name: str) -> float | None:
        return self.regions.get(name)

    def gender(self, name: str) -> float | None:
        return self.gender_totals.get(name)

    def gender_age(self, gender: str, bracket: str) -> float | None:
        brackets = self.by_gender_age.get(gender)
        if brackets is None:
            return None
        return brackets.get(bracket)

    def age_brackets(self) -> list[str]:
        seen: dict[str, None] = {}
        for brackets in self.by_gender_age.values():
            for bracket in brackets:
                seen.setdefault(bracket, None)
        return list(seen)


@dataclass(frozen=True)
class ReferenceSnapshot:
    """Consistent view of the loaded reference data.

    Either dataset may be ``None`` while loading is pending or after a failed
    load; lookups treat that as missing data.
    """

    percentiles: tuple[EmpiricalTier, ...] | None = None
    averages: AverageReferenceSet | None = None
    loaded_at: datetime | None = None
    skipped_rows: int = 0
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_loaded(self) -> bool:
        return self.loaded_at is not None

    def describe(self) -> dict[str, Any]:
        averages = self.averages
        return {
            "loaded": self.is_loaded,
            "loaded_at": self.loaded_at.isoformat() if self.loaded_at else None,
            "percentile_rows": len(self.percentiles) if self.percentiles else 0,
            "skipped_rows": self.skipped_rows,
            "averages_available": averages is not None,
            "regions": list(averages.regions) if averages else [],
            "genders": list(averages.gender_totals) if averages else [],
            "age_brackets": averages.age_brackets() if averages else [],
            "errors": list(self.errors),
        }


__all__ = ["AverageReferenceSet", "EmpiricalTier", "ReferenceSnapshot"]
