"""Submission and trend orchestration over an injected store."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Mapping

from . import schemas
from .aggregations import aggregate_records
from .scoring import compute_scores, sanitize_free_text, validate_questions
from .signals import evaluate_signals
from .store import PulseStore
from .utils import utc_now

logger = logging.getLogger(__name__)


class PulseService:
    def __init__(self, store: PulseStore, *, clock: Callable[[], datetime] = utc_now) -> None:
        self.store = store
        self._clock = clock

    def submit_pulse(self, body: Mapping[str, object], role: str) -> schemas.SubmissionResult:
        """Validate, score and persist one response.

        ``role`` is supplied by the caller; any ``role`` key in ``body`` is
        ignored.
        """
        questions, errors = validate_questions(body)
        if questions is None:
            logger.info("Rejected pulse submission for role %s with %d field errors", role, len(errors))
            return schemas.SubmissionResult(success=False, role=role, errors=errors)

        record = schemas.PulseRecord(
            role=role,
            submitted_at=self._clock(),
            questions=questions,
            scores=compute_scores(questions),
            free_text=sanitize_free_text(body.get("free_text")),
        )
        self.store.insert(record.to_row())
        logger.info("Recorded pulse submission for role %s", role)
        return schemas.SubmissionResult(success=True, role=role)

    def get_trends(self) -> schemas.TrendsResponse:
        rows = self.store.list_all()
        aggregate = aggregate_records(rows)
        report = evaluate_signals(aggregate.windows)
        logger.info(
            "Computed pulse trends: %d rows, %d windows, %d signals",
            len(rows),
            len(aggregate.windows),
            len(report.signals),
        )
        return schemas.TrendsResponse(
            windows=aggregate.windows,
            trend_inference_suppressed=aggregate.trend_inference_suppressed,
            signals=report.signals,
            section_trends=report.section_trends,
        )
