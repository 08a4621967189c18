#!/usr/bin/env python3
"""Collect baseline timings for the net pay engine."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from krnetpay.backend.app.services.calculation_service import calculate_salary  # noqa: E402
from krnetpay.backend.app.services.calculators import (  # noqa: E402
    compute_net,
    solve_gross_for_target_net,
)

SAMPLE_PAYLOAD = {
    "gross_annual": 52_000_000,
    "dependents": 2,
    "selections": {"age_bracket": "30s", "region": "서울", "gender": "여성"},
}


def _time(label: str, iterations: int, func) -> dict[str, float]:
    func()  # Warm caches
    start = perf_counter()
    for _ in range(iterations):
        func()
    elapsed = perf_counter() - start
    return {
        "name": label,
        "iterations": iterations,
        "total_ms": round(elapsed * 1000, 3),
        "per_call_us": round(elapsed / iterations * 1_000_000, 3),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--iterations", type=int, default=2_000)
    args = parser.parse_args(argv)

    results = [
        _time("compute_net", args.iterations, lambda: compute_net(4_000_000, 2)),
        _time(
            "solve_gross_for_target_net",
            max(args.iterations // 10, 1),
            lambda: solve_gross_for_target_net(3_200_000, 2),
        ),
        _time(
            "calculate_salary",
            max(args.iterations // 10, 1),
            lambda: calculate_salary(SAMPLE_PAYLOAD),
        ),
    ]
    print(json.dumps(results, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
