"""Percentile and ratio lookups against tabular reference data.

Two tier policies coexist on purpose. Static tables resolve to the highest
threshold the amount reaches, while empirical tables resolve to the smallest
(best) percentile label among every qualifying row. Empirical tables are
finer grained and their rows need not be ordered.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from krnetpay.backend.app.models.reference import EmpiricalTier
from krnetpay.backend.config.engine_config import PercentileTier

RANKED = "ranked"
OUTSIDE_RANGE = "outside_range"
NO_DATA = "no_data"
COMPARED = "compared"


@dataclass(frozen=True, slots=True)
class TierRanking:
    """Outcome of ranking an amount against static tiers."""

    amount: float
    percentile: float
    threshold: float | None

    @property
    def matched(self) -> bool:
        return self.threshold is not None

    @property
    def top_percent(self) -> float:
        top = 100 - self.percentile
        return top if top > 0 else 0.0


@dataclass(frozen=True, slots=True)
class EmpiricalRanking:
    """Outcome of ranking an amount against an externally sourced table."""

    status: str
    percentile: float | None = None
    threshold: float | None = None
    max_label: float | None = None


@dataclass(frozen=True, slots=True)
class AverageComparison:
    """Ratio of an amount to a reference average, in percent."""

    status: str
    ratio: float | None = None
    reference: float | None = None


def rank_by_static_tier(amount: float, table: Sequence[PercentileTier]) -> TierRanking:
    """Return the tier with the highest threshold not exceeding ``amount``.

    Equal thresholds resolve to the later tier. No match ranks at zero.
    """

    matched: PercentileTier | None = None
    for tier in table:
        if amount < tier.threshold:
            continue
        if matched is None or tier.threshold >= matched.threshold:
            matched = tier

    if matched is None:
        return TierRanking(amount=amount, percentile=0.0, threshold=None)
    return TierRanking(amount=amount, percentile=matched.percentile, threshold=matched.threshold)


def adjust_tiers(table: Iterable[PercentileTier], multiplier: float) -> tuple[PercentileTier, ...]:
    """Scale every threshold by ``multiplier`` while keeping the ranks."""

    return tuple(
        PercentileTier(threshold=tier.threshold * multiplier, percentile=tier.percentile)
        for tier in table
    )


def rank_by_age_adjusted_tier(
    amount: float,
    table: Sequence[PercentileTier],
    age_bracket: str,
    multipliers: Mapping[str, float],
) -> TierRanking:
    """Rank ``amount`` against ``table`` rescaled for ``age_bracket``.

    Raises ``KeyError`` for brackets missing from ``multipliers``.
    """

    multiplier = multipliers[age_bracket]
    return rank_by_static_tier(amount, adjust_tiers(table, multiplier))


def rank_by_empirical_tier(
    amount: float, tiers: Sequence[EmpiricalTier] | None
) -> EmpiricalRanking:
    """Return the best percentile label among tiers whose threshold ``amount`` meets."""

    if not tiers:
        return EmpiricalRanking(status=NO_DATA)

    best: EmpiricalTier | None = None
    for tier in tiers:
        if tier.threshold > amount:
            continue
        if best is None or tier.percentile < best.percentile:
            best = tier

    if best is None:
        max_label = max(tier.percentile for tier in tiers)
        return EmpiricalRanking(status=OUTSIDE_RANGE, max_label=max_label)

    return EmpiricalRanking(
        status=RANKED, percentile=best.percentile, threshold=best.threshold
    )


def ratio_to_average(amount: float, reference: float | None) -> AverageComparison:
    """Express ``amount`` as a percentage of ``reference`` to one decimal place."""

    if reference is None or reference <= 0:
        return AverageComparison(status=NO_DATA)

    ratio = round(amount / reference * 100, 1)
    return AverageComparison(status=COMPARED, ratio=ratio, reference=reference)


__all__ = [
    "AverageComparison",
    "COMPARED",
    "EmpiricalRanking",
    "NO_DATA",
    "OUTSIDE_RANGE",
    "RANKED",
    "TierRanking",
    "adjust_tiers",
    "rank_by_age_adjusted_tier",
    "rank_by_empirical_tier",
    "rank_by_static_tier",
    "ratio_to_average",
]
