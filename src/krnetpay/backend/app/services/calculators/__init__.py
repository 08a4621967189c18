"""Domain-specific calculation helpers."""

from .deductions import DeductionBreakdown, compute_net
from .inverse import solve_gross_for_target_net
from .ranking import (
    AverageComparison,
    EmpiricalRanking,
    TierRanking,
    rank_by_age_adjusted_tier,
    rank_by_empirical_tier,
    rank_by_static_tier,
    ratio_to_average,
)
from .utils import format_percentage, format_won, round_currency, round_rate

__all__ = [
    "AverageComparison",
    "DeductionBreakdown",
    "EmpiricalRanking",
    "TierRanking",
    "compute_net",
    "format_percentage",
    "format_won",
    "rank_by_age_adjusted_tier",
    "rank_by_empirical_tier",
    "rank_by_static_tier",
    "ratio_to_average",
    "round_currency",
    "round_rate",
    "solve_gross_for_target_net",
]
