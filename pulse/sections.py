"""Fixed section rubric shared by scoring, aggregation and signals."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

QUESTION_KEYS: Tuple[str, ...] = tuple(f"q{idx}" for idx in range(1, 13))
ANSWER_MIN = 1
ANSWER_MAX = 5


class Section(str, Enum):
    S1 = "s1"
    S2 = "s2"
    S3 = "s3"
    S4 = "s4"


@dataclass(frozen=True)
class SectionSpec:
    """Static description of one survey section.

    Question positions are 0-based indices into the ordered ``q1..q12``
    answers. Field names are spelled out so nothing downstream composes
    keys at runtime.
    """

    section: Section
    name: str
    structural_questions: Tuple[int, int]
    clarity_question: int
    structural_field: str
    clarity_field: str
    structural_key: str
    clarity_key: str
    alignment_key: str


SECTION_SPECS: Tuple[SectionSpec, ...] = (
    SectionSpec(
        section=Section.S1,
        name="Authority & Decision Structure",
        structural_questions=(0, 1),
        clarity_question=2,
        structural_field="structural_score_s1",
        clarity_field="clarity_score_s1",
        structural_key="structuralScore_s1",
        clarity_key="clarityScore_s1",
        alignment_key="alignmentIndex_s1",
    ),
    SectionSpec(
        section=Section.S2,
        name="Service Intent & Boundaries",
        structural_questions=(3, 4),
        clarity_question=5,
        structural_field="structural_score_s2",
        clarity_field="clarity_score_s2",
        structural_key="structuralScore_s2",
        clarity_key="clarityScore_s2",
        alignment_key="alignmentIndex_s2",
    ),
    SectionSpec(
        section=Section.S3,
        name="Lifecycle & Operational Modelling",
        structural_questions=(6, 7),
        clarity_question=8,
        structural_field="structural_score_s3",
        clarity_field="clarity_score_s3",
        structural_key="structuralScore_s3",
        clarity_key="clarityScore_s3",
        alignment_key="alignmentIndex_s3",
    ),
    SectionSpec(
        section=Section.S4,
        name="Architectural & Dependency Discipline",
        structural_questions=(9, 10),
        clarity_question=11,
        structural_field="structural_score_s4",
        clarity_field="clarity_score_s4",
        structural_key="structuralScore_s4",
        clarity_key="clarityScore_s4",
        alignment_key="alignmentIndex_s4",
    ),
)


__all__ = [
    "ANSWER_MAX",
    "ANSWER_MIN",
    "QUESTION_KEYS",
    "SECTION_SPECS",
    "Section",
    "SectionSpec",
]
