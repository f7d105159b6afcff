from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from pulse.service import PulseService
from pulse.store import FallbackPulseStore, InMemoryPulseStore, JsonlPulseStore

VALID_PAYLOAD = {
    "q1": 4, "q2": 2, "q3": 4,
    "q4": 3, "q5": 5, "q6": 2,
    "q7": 1, "q8": 3, "q9": 5,
    "q10": 5, "q11": 4, "q12": 3,
}


class StepClock:
    """Returns ``start``, ``start + step``, ... on successive calls."""

    def __init__(self, start: datetime, step: timedelta) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


def make_service(step: timedelta = timedelta(0)):
    store = InMemoryPulseStore()
    clock = StepClock(datetime(2025, 2, 3, 12, 0, tzinfo=timezone.utc), step)
    return PulseService(store, clock=clock), store


def test_submit_persists_scores_and_sanitised_text():
    service, store = make_service()
    result = service.submit_pulse(
        {**VALID_PAYLOAD, "free_text": "<script>alert(1)</script>clarity feels weak", "role": "PILOT_SME"},
        "PILOT_BUILDER",
    )
    assert result.success is True
    assert result.role == "PILOT_BUILDER"

    rows = store.list_all()
    assert len(rows) == 1
    row = rows[0]
    assert row["role"] == "PILOT_BUILDER"
    assert row["submitted_at"] == "2025-02-03T12:00:00.000Z"
    assert row["q7"] == 1
    assert row["structural_score_s4"] == 4.5
    assert row["clarity_score_s3"] == 5.0
    assert row["free_text"] == "alert(1)clarity feels weak"


def test_missing_free_text_is_stored_as_none():
    service, store = make_service()
    service.submit_pulse(VALID_PAYLOAD, "PILOT_SME")
    assert store.list_all()[0]["free_text"] is None


def test_invalid_submission_is_rejected_without_writing():
    service, store = make_service()
    result = service.submit_pulse({"q1": 6}, "PILOT_BUILDER")
    assert result.success is False
    assert result.errors[0] == "q1 must be an integer between 1 and 5"
    assert "q12 is required" in result.errors
    assert store.list_all() == []


def test_trends_scenario_b_two_roles_same_timestamp():
    service, _ = make_service()
    service.submit_pulse({**VALID_PAYLOAD, "q1": 1, "q2": 1}, "BUILDER")
    service.submit_pulse({**VALID_PAYLOAD, "q1": 5, "q2": 5}, "SME")

    trends = service.get_trends()
    assert len(trends.windows) == 1
    assert trends.trend_inference_suppressed is True
    window = trends.windows[0]
    assert window.section("s1").alignment_index == pytest.approx(2.0)
    assert window.alignment_warning is None


def test_trends_scenario_c_monthly_responses():
    service, _ = make_service(step=timedelta(days=30))
    for _ in range(5):
        service.submit_pulse(VALID_PAYLOAD, "PILOT_SME")

    trends = service.get_trends()
    assert [w.window_index for w in trends.windows] == [1, 2, 3, 4, 5]
    assert trends.trend_inference_suppressed is False
    assert all(w.alignment_warning for w in trends.windows)


def test_trends_payload_hides_raw_answers():
    service, _ = make_service()
    service.submit_pulse({**VALID_PAYLOAD, "free_text": "private note"}, "PILOT_SME")
    payload = service.get_trends().as_payload()
    assert set(payload) == {"windows", "trendInferenceSuppressed", "signals", "sectionTrends"}
    flat = repr(payload)
    assert "'q1'" not in flat
    assert "free_text" not in flat
    assert "private note" not in flat


def test_empty_store_trends():
    service, _ = make_service()
    payload = service.get_trends().as_payload()
    assert payload["windows"] == []
    assert payload["trendInferenceSuppressed"] is True
    assert payload["signals"] == []


def test_torn_append_keeps_durable_history(tmp_path):
    path = tmp_path / "responses.jsonl"
    clock = StepClock(datetime(2025, 2, 3, 12, 0, tzinfo=timezone.utc), timedelta(hours=1))
    service = PulseService(FallbackPulseStore(JsonlPulseStore(path)), clock=clock)
    for role in ("PILOT_BUILDER", "PILOT_SME", "PILOT_BUILDER"):
        assert service.submit_pulse(VALID_PAYLOAD, role).success
    with path.open("ab") as f:
        f.write(b'{"submitted_at": "2025-')

    trends = service.get_trends()
    assert len(trends.windows) == 1
    assert trends.windows[0].row_count == 3
