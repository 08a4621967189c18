"""Load and hold the externally supplied percentile and average datasets.

The ranking helpers only ever see an immutable :class:`ReferenceSnapshot`.
Loading builds a complete replacement snapshot which is swapped in under a
lock, so readers never observe a partially populated dataset. Failures are
logged once and recorded on the snapshot instead of propagating to callers.
"""

from __future__ import annotations

import csv
import json
import logging
import math
import re
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from io import StringIO
from pathlib import Path
from threading import Lock
from typing import Any, Callable

from pydantic import ValidationError

from krnetpay.backend.app.models.reference import (
    AverageReferenceSet,
    EmpiricalTier,
    ReferenceSnapshot,
)

_LOGGER = logging.getLogger(__name__)

_PERCENTILE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)")


class ReferenceDataError(ValueError):
    """Raised when a reference dataset cannot be parsed at all."""


@dataclass(frozen=True)
class PercentileParseResult:
    """Parsed empirical tiers together with the number of rejected rows."""

    tiers: tuple[EmpiricalTier, ...]
    skipped: int


def _parse_amount(raw: Any) -> float | None:
    if raw is None:
        return None
    text = str(raw).replace(",", "").strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _parse_label(raw: Any) -> float | None:
    if raw is None:
        return None
    match = _PERCENTILE_PATTERN.search(str(raw))
    if match is None:
        return None
    return float(match.group(1))


def parse_percentile_csv(
    text: str,
    *,
    label_field: str | None = None,
    salary_field: str = "total_salary",
) -> PercentileParseResult:
    """Parse CSV ``text`` into empirical tiers.

    The label column defaults to the first column and must embed a
    percentile number (``"상위 10%"``). Rows without a numeric salary or a
    recognisable label are skipped.
    """

    reader = csv.DictReader(StringIO(text.lstrip("\ufeff")))
    try:
        fieldnames = reader.fieldnames or []
        if not fieldnames:
            raise ReferenceDataError("Percentile table is empty")

        label_column = label_field or fieldnames[0]
        if label_column not in fieldnames:
            raise ReferenceDataError(f"Percentile table has no '{label_column}' column")
        if salary_field not in fieldnames:
            raise ReferenceDataError(f"Percentile table has no '{salary_field}' column")

        tiers: list[EmpiricalTier] = []
        skipped = 0
        for row in reader:
            label = row.get(label_column)
            percentile = _parse_label(label)
            threshold = _parse_amount(row.get(salary_field))
            if percentile is None or threshold is None:
                skipped += 1
                continue
            tiers.append(
                EmpiricalTier(
                    percentile=percentile, threshold=threshold, label=str(label).strip()
                )
            )
    except csv.Error as exc:
        raise ReferenceDataError(f"Malformed percentile table: {exc}") from exc

    if skipped:
        _LOGGER.warning("Skipped %d unparseable percentile row(s)", skipped)

    return PercentileParseResult(tiers=tuple(tiers), skipped=skipped)


def parse_average_payload(payload: Any) -> AverageReferenceSet:
    """Validate a decoded JSON payload into an :class:`AverageReferenceSet`."""

    if not isinstance(payload, Mapping):
        raise ReferenceDataError("Average reference data must be a JSON object")
    try:
        return AverageReferenceSet.model_validate(payload)
    except ValidationError as exc:
        raise ReferenceDataError(f"Invalid average reference data: {exc}") from exc


def read_percentile_file(path: Path, **kwargs: Any) -> PercentileParseResult:
    return parse_percentile_csv(path.read_text(encoding="utf-8"), **kwargs)


def read_average_file(path: Path) -> AverageReferenceSet:
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return parse_average_payload(payload)


class ReferenceDataStore:
    """Thread-safe holder of the current reference snapshot."""

    def __init__(
        self,
        snapshot: ReferenceSnapshot | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._snapshot = snapshot or ReferenceSnapshot()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = Lock()
        self._executor: ThreadPoolExecutor | None = None

    def snapshot(self) -> ReferenceSnapshot:
        with self._lock:
            return self._snapshot

    def replace(self, snapshot: ReferenceSnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot
        _LOGGER.info(
            "Reference data replaced (%d percentile rows, averages=%s)",
            len(snapshot.percentiles or ()),
            snapshot.averages is not None,
        )

    def load(
        self,
        percentile_path: Path | None,
        averages_path: Path | None,
        *,
        label_field: str | None = None,
        salary_field: str = "total_salary",
    ) -> ReferenceSnapshot:
        """Load both datasets and swap them in as a single snapshot."""

        errors: list[str] = []
        percentiles: tuple[EmpiricalTier, ...] | None = None
        averages: AverageReferenceSet | None = None
        skipped = 0

        if percentile_path is not None:
            try:
                result = read_percentile_file(
                    percentile_path, label_field=label_field, salary_field=salary_field
                )
            except (OSError, UnicodeDecodeError, ReferenceDataError) as exc:
                _LOGGER.exception("Failed to load percentile table from %s", percentile_path)
                errors.append(f"percentiles: {exc}")
            else:
                percentiles = result.tiers
                skipped = result.skipped

        if averages_path is not None:
            try:
                averages = read_average_file(averages_path)
            except (OSError, ValueError) as exc:
                _LOGGER.exception("Failed to load average data from %s", averages_path)
                errors.append(f"averages: {exc}")

        snapshot = ReferenceSnapshot(
            percentiles=percentiles,
            averages=averages,
            loaded_at=self._clock(),
            skipped_rows=skipped,
            errors=tuple(errors),
        )
        self.replace(snapshot)
        return snapshot

    def load_in_background(
        self,
        percentile_path: Path | None,
        averages_path: Path | None,
        **kwargs: Any,
    ) -> Future[ReferenceSnapshot]:
        """Schedule :meth:`load` on a worker thread and return its future."""

        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="krnetpay-reference"
                )
            executor = self._executor
        return executor.submit(self.load, percentile_path, averages_path, **kwargs)

    def shutdown(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)


__all__ = [
    "PercentileParseResult",
    "ReferenceDataError",
    "ReferenceDataStore",
    "parse_average_payload",
    "parse_percentile_csv",
    "read_average_file",
    "read_percentile_file",
]
