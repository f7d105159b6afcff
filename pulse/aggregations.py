"""Window aggregation for pulse trend analytics."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import numpy as np

from . import schemas
from .sections import SECTION_SPECS

logger = logging.getLogger(__name__)

WINDOW_LENGTH = timedelta(days=14)
MIN_WINDOWS_FOR_TREND = 3
MIN_ROLES_FOR_ALIGNMENT = 2
ALIGNMENT_WARNING = "Insufficient role diversity for alignment index"


def _mean(values: Sequence[float]) -> float:
    return float(np.mean(np.asarray(values, dtype=float)))


def _population_stddev(values: Sequence[float]) -> float:
    # A single value has no dispersion.
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def _build_window(
    window_index: int,
    bucket: int,
    anchor: datetime,
    rows: Sequence[schemas.PulseRow],
) -> schemas.TrendWindow:
    role_count = len({row.role for row in rows})
    has_alignment = role_count >= MIN_ROLES_FOR_ALIGNMENT

    sections: List[schemas.SectionWindowStats] = []
    for position, spec in enumerate(SECTION_SPECS):
        structural_values = [row.structural[position] for row in rows]
        clarity_values = [row.clarity[position] for row in rows]
        sections.append(
            schemas.SectionWindowStats(
                section=spec.section,
                structural_score=_mean(structural_values),
                clarity_score=_mean(clarity_values),
                alignment_index=_population_stddev(structural_values) if has_alignment else None,
            )
        )

    return schemas.TrendWindow(
        window_index=window_index,
        window_start=anchor + bucket * WINDOW_LENGTH,
        row_count=len(rows),
        role_count=role_count,
        sections=tuple(sections),
        alignment_warning=None if has_alignment else ALIGNMENT_WARNING,
    )


def aggregate_windows(rows: Sequence[schemas.PulseRow]) -> schemas.AggregateResult:
    """Group rows into 14-day windows anchored at the earliest submission.

    Buckets are half-open ``[start, start + 14 days)``. Only non-empty
    buckets become windows, numbered from 1 in chronological order.
    """
    if not rows:
        return schemas.AggregateResult(windows=[], trend_inference_suppressed=True)

    # sorted() is stable, so equal timestamps keep their input order.
    ordered = sorted(rows, key=lambda row: row.submitted_at)
    anchor = ordered[0].submitted_at

    buckets: Dict[int, List[schemas.PulseRow]] = defaultdict(list)
    for row in ordered:
        buckets[(row.submitted_at - anchor) // WINDOW_LENGTH].append(row)

    windows = [
        _build_window(window_index, bucket, anchor, buckets[bucket])
        for window_index, bucket in enumerate(sorted(buckets), start=1)
    ]
    suppressed = len(windows) < MIN_WINDOWS_FOR_TREND
    logger.debug(
        "Aggregated %d rows into %d windows (suppressed=%s)", len(ordered), len(windows), suppressed
    )
    return schemas.AggregateResult(windows=windows, trend_inference_suppressed=suppressed)


def coerce_rows(records: Iterable[Mapping[str, Any]]) -> List[schemas.PulseRow]:
    """Coerce storage rows, skipping (and logging) any that are malformed."""
    rows: List[schemas.PulseRow] = []
    for record in records:
        try:
            rows.append(schemas.PulseRow.from_record(record))
        except ValueError as exc:
            logger.warning("Skipping malformed pulse row: %s", exc)
    return rows


def aggregate_records(records: Iterable[Mapping[str, Any]]) -> schemas.AggregateResult:
    """Coerce raw storage rows and aggregate them."""
    return aggregate_windows(coerce_rows(records))


__all__ = [
    "ALIGNMENT_WARNING",
    "MIN_WINDOWS_FOR_TREND",
    "WINDOW_LENGTH",
    "aggregate_records",
    "aggregate_windows",
    "coerce_rows",
]
