"""Recover the gross salary that yields a requested net salary."""

from __future__ import annotations

from krnetpay.backend.config.engine_config import (
    DeductionRates,
    SolverConfig,
    load_engine_configuration,
)

from .deductions import compute_net


def solve_gross_for_target_net(
    target_net_monthly: float,
    dependents: int = 1,
    *,
    rates: DeductionRates | None = None,
    solver: SolverConfig | None = None,
) -> float:
    """Return the gross monthly salary whose net pay reaches ``target_net_monthly``.

    The upper bound starts at ``max(2 * target, 1,000,000)`` and grows by
    ``growth_factor`` until it clears the target, then a fixed number of
    bisection steps narrows it. The converged upper bound is returned, so the
    result always produces at least the requested net pay when the target is
    reachable. An unreachable target yields the last expanded bound.
    """

    if target_net_monthly <= 0:
        return 0.0

    if rates is None or solver is None:
        config = load_engine_configuration()
        rates = rates or config.deductions
        solver = solver or config.solver

    def net_for(gross: float) -> float:
        return compute_net(gross, dependents, rates).net_monthly

    high = max(target_net_monthly * solver.initial_multiplier, solver.minimum_upper_bound)
    for _ in range(solver.max_expansions):
        if net_for(high) >= target_net_monthly:
            break
        high *= solver.growth_factor

    low = 0.0
    for _ in range(solver.iterations):
        mid = (low + high) / 2
        if net_for(mid) < target_net_monthly:
            low = mid
        else:
            high = mid

    return high


__all__ = ["solve_gross_for_target_net"]
