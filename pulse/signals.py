"""Trend directions and governance signals derived from aggregated windows."""

from __future__ import annotations

from typing import List, Optional, Sequence

from . import schemas
from .aggregations import MIN_WINDOWS_FOR_TREND
from .sections import SECTION_SPECS, SectionSpec

LOW_STRUCTURAL_THRESHOLD = 3.0
HIGH_ALIGNMENT_THRESHOLD = 1.0
STABLE_TOLERANCE = 0.1  # absolute score change still treated as "no change"

SIGNAL_MESSAGES = {
    "LOW_STRUCTURAL_SCORE": "Structural score is below the acceptable threshold",
    "HIGH_ALIGNMENT_INDEX": "Roles disagree strongly on structural clarity",
    "CLARITY_FALLING": "Clarity is falling while structure is unchanged",
    "ALIGNMENT_INCREASING": "Cross-role disagreement is increasing",
}


def _direction(delta: Optional[float], tolerance: float) -> schemas.TrendDirection:
    if delta is None:
        return "insufficient_data"
    if delta > tolerance:
        return "improving"
    if delta < -tolerance:
        return "declining"
    return "flat"


def _signal(level: schemas.SignalLevel, code: str, spec: SectionSpec) -> schemas.Signal:
    return schemas.Signal(
        level=level,
        code=code,
        section=spec.section,
        section_name=spec.name,
        message=SIGNAL_MESSAGES[code],
    )


def _section_trend(
    spec: SectionSpec,
    latest: Optional[schemas.SectionWindowStats],
    previous: Optional[schemas.SectionWindowStats],
    tolerance: float,
) -> schemas.SectionTrend:
    if latest is None or previous is None:
        return schemas.SectionTrend(section=spec.section, section_name=spec.name)
    structural_delta = latest.structural_score - previous.structural_score
    clarity_delta = latest.clarity_score - previous.clarity_score
    return schemas.SectionTrend(
        section=spec.section,
        section_name=spec.name,
        structural_direction=_direction(structural_delta, tolerance),
        clarity_direction=_direction(clarity_delta, tolerance),
        structural_delta=structural_delta,
        clarity_delta=clarity_delta,
    )


def _section_signals(
    spec: SectionSpec,
    latest: schemas.SectionWindowStats,
    previous: Optional[schemas.SectionWindowStats],
    *,
    low_structural: float,
    high_alignment: float,
    tolerance: float,
) -> List[schemas.Signal]:
    signals: List[schemas.Signal] = []
    if latest.structural_score < low_structural:
        signals.append(_signal("critical", "LOW_STRUCTURAL_SCORE", spec))
    if latest.alignment_index is not None and latest.alignment_index >= high_alignment:
        signals.append(_signal("critical", "HIGH_ALIGNMENT_INDEX", spec))

    if previous is None:
        return signals

    structural_stable = abs(latest.structural_score - previous.structural_score) <= tolerance
    if structural_stable and latest.clarity_score < previous.clarity_score:
        signals.append(_signal("warning", "CLARITY_FALLING", spec))
    if (
        previous.alignment_index is not None
        and latest.alignment_index is not None
        and latest.alignment_index > previous.alignment_index
    ):
        signals.append(_signal("warning", "ALIGNMENT_INCREASING", spec))
    return signals


def evaluate_signals(
    windows: Sequence[schemas.TrendWindow],
    *,
    low_structural: float = LOW_STRUCTURAL_THRESHOLD,
    high_alignment: float = HIGH_ALIGNMENT_THRESHOLD,
    tolerance: float = STABLE_TOLERANCE,
) -> schemas.SignalReport:
    """Compare the latest window with the one before it.

    Level signals only need the latest window; anything that compares two
    windows, including every trend direction, reports nothing (or
    ``insufficient_data``) when fewer than two windows exist.
    """
    latest = windows[-1] if windows else None
    previous = windows[-2] if len(windows) >= 2 else None

    section_trends: List[schemas.SectionTrend] = []
    signals: List[schemas.Signal] = []
    for spec in SECTION_SPECS:
        latest_stats = latest.section(spec.section) if latest is not None else None
        previous_stats = previous.section(spec.section) if previous is not None else None
        section_trends.append(_section_trend(spec, latest_stats, previous_stats, tolerance))
        if latest_stats is not None:
            signals.extend(
                _section_signals(
                    spec,
                    latest_stats,
                    previous_stats,
                    low_structural=low_structural,
                    high_alignment=high_alignment,
                    tolerance=tolerance,
                )
            )

    return schemas.SignalReport(
        trend_inference_suppressed=len(windows) < MIN_WINDOWS_FOR_TREND,
        section_trends=section_trends,
        signals=signals,
    )


__all__ = [
    "HIGH_ALIGNMENT_THRESHOLD",
    "LOW_STRUCTURAL_THRESHOLD",
    "SIGNAL_MESSAGES",
    "STABLE_TOLERANCE",
    "evaluate_signals",
]
