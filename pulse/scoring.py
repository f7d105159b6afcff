"""Scoring rubric and submission-boundary validation for pulse responses."""

from __future__ import annotations

import math
import re
from typing import List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .schemas import QuestionInputs, ScoreOutputs
from .sections import ANSWER_MAX, ANSWER_MIN, QUESTION_KEYS, SECTION_SPECS

_TAG_PATTERN = re.compile(r"<[^>]*>")


def _check_answer(key: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    if not ANSWER_MIN <= value <= ANSWER_MAX:
        raise ValueError(f"{key} must be between {ANSWER_MIN} and {ANSWER_MAX}, got {value}")
    return value


def compute_scores(questions: QuestionInputs) -> ScoreOutputs:
    """Map twelve answers to the eight section scores.

    Per section the structural score is the mean of its first two questions
    and the clarity score is its third question. Raises ``ValueError`` if an
    answer slipped past validation (e.g. a model built with
    ``model_construct``).
    """
    answers = tuple(
        _check_answer(key, value) for key, value in zip(QUESTION_KEYS, questions.answers())
    )
    structural: List[float] = []
    clarity: List[float] = []
    for spec in SECTION_SPECS:
        first, second = spec.structural_questions
        structural.append((answers[first] + answers[second]) / 2)
        clarity.append(float(answers[spec.clarity_question]))
    return ScoreOutputs.from_sections(structural, clarity)


def _coerce_answer(value: object) -> Optional[int]:
    """Return ``value`` as an int if it is an integral number, else ``None``.

    Numeric strings (``"3"``) are accepted; some clients serialise answers as strings.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or not number.is_integer():
        return None
    return int(number)


def validate_questions(body: Mapping[str, object]) -> Tuple[Optional[QuestionInputs], List[str]]:
    """Validate ``q1..q12`` in ``body``.

    Returns ``(questions, [])`` on success or ``(None, errors)`` with one
    message per offending field.
    """
    errors: List[str] = []
    answers = {}
    for key in QUESTION_KEYS:
        raw = body.get(key)
        if raw is None or raw == "":
            errors.append(f"{key} is required")
            continue
        value = _coerce_answer(raw)
        if value is None or not ANSWER_MIN <= value <= ANSWER_MAX:
            errors.append(f"{key} must be an integer between {ANSWER_MIN} and {ANSWER_MAX}")
            continue
        answers[key] = value

    if errors:
        return None, errors
    try:
        return QuestionInputs(**answers), []
    except ValidationError as exc:  # pragma: no cover - ranges already checked above
        return None, [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]


def sanitize_free_text(text: object) -> Optional[str]:
    """Strip HTML tags from free text; empty results become ``None``."""
    if text is None:
        return None
    cleaned = _TAG_PATTERN.sub("", str(text)).strip()
    return cleaned or None


__all__ = [
    "compute_scores",
    "sanitize_free_text",
    "validate_questions",
]
