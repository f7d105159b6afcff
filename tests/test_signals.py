from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from pulse.schemas import SectionWindowStats, TrendWindow
from pulse.sections import SECTION_SPECS, Section
from pulse.signals import evaluate_signals

T0 = datetime(2025, 1, 6, tzinfo=timezone.utc)


def make_window(index: int = 1, **overrides) -> TrendWindow:
    """Window with safe defaults; override via ``structural_s2=2.8`` style keys."""
    sections = []
    for spec in SECTION_SPECS:
        key = spec.section.value
        sections.append(
            SectionWindowStats(
                section=spec.section,
                structural_score=overrides.get(f"structural_{key}", 3.5),
                clarity_score=overrides.get(f"clarity_{key}", 4.0),
                alignment_index=overrides.get(f"alignment_{key}", 0.4),
            )
        )
    return TrendWindow(
        window_index=index,
        window_start=T0 + timedelta(days=14 * (index - 1)),
        row_count=2,
        role_count=2,
        sections=tuple(sections),
    )


def codes(report):
    return [signal.code for signal in report.signals]


def test_no_windows_degrades_to_no_signal():
    report = evaluate_signals([])
    assert report.signals == []
    assert report.trend_inference_suppressed is True
    assert len(report.section_trends) == 4
    assert all(t.structural_direction == "insufficient_data" for t in report.section_trends)
    assert all(t.clarity_direction == "insufficient_data" for t in report.section_trends)


def test_single_window_has_no_directions_or_consecutive_signals():
    report = evaluate_signals([make_window(clarity_s1=2.0)])
    assert all(t.structural_direction == "insufficient_data" for t in report.section_trends)
    assert all(t.structural_delta is None for t in report.section_trends)
    assert "CLARITY_FALLING" not in codes(report)
    assert "ALIGNMENT_INCREASING" not in codes(report)


def test_safe_window_raises_nothing():
    assert evaluate_signals([make_window()]).signals == []


def test_low_structural_score_is_critical():
    report = evaluate_signals([make_window(structural_s2=2.8)])
    match = next(s for s in report.signals if s.code == "LOW_STRUCTURAL_SCORE")
    assert match.level == "critical"
    assert match.section == Section.S2
    assert "Service Intent" in match.section_name


def test_high_alignment_index_is_critical_at_threshold():
    report = evaluate_signals([make_window(alignment_s3=1.0)])
    match = next(s for s in report.signals if s.code == "HIGH_ALIGNMENT_INDEX")
    assert match.level == "critical"
    assert match.section == Section.S3


def test_missing_alignment_index_never_flags():
    report = evaluate_signals([make_window(alignment_s1=None), make_window(2, alignment_s1=None)])
    assert report.signals == []


def test_clarity_falling_with_stable_structure():
    previous = make_window(1, structural_s1=3.5, clarity_s1=4.0)
    latest = make_window(2, structural_s1=3.55, clarity_s1=3.0)
    report = evaluate_signals([previous, latest])
    match = next(s for s in report.signals if s.code == "CLARITY_FALLING")
    assert match.level == "warning"
    assert match.section == Section.S1


def test_clarity_falling_requires_stable_structure():
    previous = make_window(1, structural_s1=3.5, clarity_s1=4.0)
    latest = make_window(2, structural_s1=4.0, clarity_s1=3.0)
    assert "CLARITY_FALLING" not in codes(evaluate_signals([previous, latest]))


def test_alignment_increasing_over_two_windows():
    previous = make_window(1, alignment_s4=0.6)
    latest = make_window(2, alignment_s4=0.8)
    report = evaluate_signals([previous, latest])
    match = next(s for s in report.signals if s.code == "ALIGNMENT_INCREASING")
    assert match.level == "warning"
    assert match.section == Section.S4


def test_directions_compare_latest_with_previous_only():
    windows = [
        make_window(1, structural_s1=1.0),
        make_window(2, structural_s1=3.0, clarity_s2=4.5),
        make_window(3, structural_s1=3.5, clarity_s2=3.0),
    ]
    report = evaluate_signals(windows)
    assert report.trend_inference_suppressed is False
    by_section = {t.section: t for t in report.section_trends}
    assert by_section[Section.S1].structural_direction == "improving"
    assert by_section[Section.S1].structural_delta == pytest.approx(0.5)
    assert by_section[Section.S2].clarity_direction == "declining"
    assert by_section[Section.S3].structural_direction == "flat"
    assert by_section[Section.S3].clarity_direction == "flat"


def test_two_windows_still_report_suppression():
    report = evaluate_signals([make_window(1), make_window(2)])
    assert report.trend_inference_suppressed is True
    assert all(t.structural_direction == "flat" for t in report.section_trends)


def test_inputs_are_not_mutated_and_payload_is_camel_case():
    windows = [make_window(1, alignment_s2=0.2), make_window(2, alignment_s2=1.2)]
    before = [w.model_dump() for w in windows]
    report = evaluate_signals(windows)
    assert [w.model_dump() for w in windows] == before
    dumped = report.model_dump(mode="json", by_alias=True)
    assert dumped["trendInferenceSuppressed"] is True
    assert dumped["sectionTrends"][0]["structuralDirection"] == "flat"
    assert {s["code"] for s in dumped["signals"]} == {"HIGH_ALIGNMENT_INDEX", "ALIGNMENT_INCREASING"}
    assert dumped["signals"][0]["sectionName"] == "Service Intent & Boundaries"
