"""Typed request/response models shared across the calculation services.

Pydantic models validate what arrives over HTTP and shape what leaves it,
while the reference datasets are plain immutable containers that can be
swapped wholesale when a reload completes.
"""

from .api import (
    MODE_GROSS,
    MODE_TARGET_NET,
    AverageComparisonEntry,
    CalculationRequest,
    CalculationResponse,
    ComparisonRequest,
    ComparisonSelections,
    Comparisons,
    DeductionEntry,
    EmpiricalRankingEntry,
    ResponseMeta,
    Summary,
    TierRankingEntry,
    format_validation_error,
)
from .reference import AverageReferenceSet, EmpiricalTier, ReferenceSnapshot

__all__ = [
    "AverageComparisonEntry",
    "AverageReferenceSet",
    "CalculationRequest",
    "CalculationResponse",
    "ComparisonRequest",
    "ComparisonSelections",
    "Comparisons",
    "DeductionEntry",
    "EmpiricalRankingEntry",
    "EmpiricalTier",
    "MODE_GROSS",
    "MODE_TARGET_NET",
    "ReferenceSnapshot",
    "ResponseMeta",
    "Summary",
    "TierRankingEntry",
    "format_validation_error",
]
