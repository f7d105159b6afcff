"""Pydantic schemas shared across the pulse pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .sections import ANSWER_MAX, ANSWER_MIN, SECTION_SPECS, Section
from .utils import format_timestamp, parse_timestamp, safe_float

Answer = Annotated[int, Field(strict=True, ge=ANSWER_MIN, le=ANSWER_MAX)]
TrendDirection = Literal["improving", "declining", "flat", "insufficient_data"]
SignalLevel = Literal["critical", "warning"]

_SECTION_POSITION = {spec.section: position for position, spec in enumerate(SECTION_SPECS)}


class QuestionInputs(BaseModel):
    """One respondent's answers, each an integer in ``[1, 5]``."""

    model_config = ConfigDict(frozen=True)

    q1: Answer
    q2: Answer
    q3: Answer
    q4: Answer
    q5: Answer
    q6: Answer
    q7: Answer
    q8: Answer
    q9: Answer
    q10: Answer
    q11: Answer
    q12: Answer

    def answers(self) -> Tuple[int, ...]:
        return (
            self.q1, self.q2, self.q3,
            self.q4, self.q5, self.q6,
            self.q7, self.q8, self.q9,
            self.q10, self.q11, self.q12,
        )


class ScoreOutputs(BaseModel):
    model_config = ConfigDict(frozen=True)

    structural_score_s1: float
    structural_score_s2: float
    structural_score_s3: float
    structural_score_s4: float
    clarity_score_s1: float
    clarity_score_s2: float
    clarity_score_s3: float
    clarity_score_s4: float

    @classmethod
    def from_sections(cls, structural: Sequence[float], clarity: Sequence[float]) -> "ScoreOutputs":
        s1, s2, s3, s4 = structural
        c1, c2, c3, c4 = clarity
        return cls(
            structural_score_s1=s1,
            structural_score_s2=s2,
            structural_score_s3=s3,
            structural_score_s4=s4,
            clarity_score_s1=c1,
            clarity_score_s2=c2,
            clarity_score_s3=c3,
            clarity_score_s4=c4,
        )

    @property
    def structural(self) -> Tuple[float, float, float, float]:
        return (
            self.structural_score_s1,
            self.structural_score_s2,
            self.structural_score_s3,
            self.structural_score_s4,
        )

    @property
    def clarity(self) -> Tuple[float, float, float, float]:
        return (
            self.clarity_score_s1,
            self.clarity_score_s2,
            self.clarity_score_s3,
            self.clarity_score_s4,
        )


class PulseRecord(BaseModel):
    """A validated submission ready to be written to a store."""

    model_config = ConfigDict(frozen=True)

    role: str
    submitted_at: datetime
    questions: QuestionInputs
    scores: ScoreOutputs
    free_text: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "submitted_at": format_timestamp(self.submitted_at),
            "role": self.role,
        }
        row.update(self.questions.model_dump())
        row.update(self.scores.model_dump())
        row["free_text"] = self.free_text
        return row


@dataclass(frozen=True)
class PulseRow:
    """Storage row as consumed by aggregation, with strictly typed fields."""

    submitted_at: datetime
    role: str
    structural: Tuple[float, float, float, float]
    clarity: Tuple[float, float, float, float]

    def __post_init__(self) -> None:
        # Naive and aware datetimes cannot be compared, so everything is UTC-aware.
        submitted_at = parse_timestamp(self.submitted_at)
        if submitted_at is None:
            raise ValueError(f"submitted_at is not a valid timestamp: {self.submitted_at!r}")
        object.__setattr__(self, "submitted_at", submitted_at)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "PulseRow":
        """Coerce a loosely typed storage mapping into a ``PulseRow``.

        Backends disagree on types (numeric columns may come back as strings,
        timestamps as strings or datetimes); this is the only place that
        tolerates that.
        """
        submitted_at = parse_timestamp(record.get("submitted_at"))
        if submitted_at is None:
            raise ValueError(f"submitted_at is not a valid timestamp: {record.get('submitted_at')!r}")
        role = record.get("role")
        if role is None or str(role) == "":
            raise ValueError("role is required")
        structural = tuple(_coerce_score(record, spec.structural_field) for spec in SECTION_SPECS)
        clarity = tuple(_coerce_score(record, spec.clarity_field) for spec in SECTION_SPECS)
        return cls(
            submitted_at=submitted_at,
            role=str(role),
            structural=structural,  # type: ignore[arg-type]
            clarity=clarity,  # type: ignore[arg-type]
        )


def _coerce_score(record: Mapping[str, Any], field_name: str) -> float:
    value = safe_float(record.get(field_name))
    if value is None:
        raise ValueError(f"{field_name} is not numeric: {record.get(field_name)!r}")
    return value


class SectionWindowStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    section: Section
    structural_score: float
    clarity_score: float
    alignment_index: Optional[float] = None


class TrendWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    window_index: int
    window_start: datetime
    row_count: int = 0
    role_count: int = 0
    sections: Tuple[SectionWindowStats, ...]
    alignment_warning: Optional[str] = None

    def section(self, section: Section | str) -> SectionWindowStats:
        return self.sections[_SECTION_POSITION[Section(section)]]

    def as_payload(self) -> Dict[str, Any]:
        """Flat wire shape, e.g. ``structuralScore_s1``/``alignmentIndex_s1``."""
        payload: Dict[str, Any] = {
            "windowIndex": self.window_index,
            "windowStart": format_timestamp(self.window_start),
            "rowCount": self.row_count,
            "roleCount": self.role_count,
        }
        for spec, stats in zip(SECTION_SPECS, self.sections):
            payload[spec.structural_key] = stats.structural_score
            payload[spec.clarity_key] = stats.clarity_score
            payload[spec.alignment_key] = stats.alignment_index
        if self.alignment_warning is not None:
            payload["alignmentWarning"] = self.alignment_warning
        return payload


class AggregateResult(BaseModel):
    windows: List[TrendWindow] = Field(default_factory=list)
    trend_inference_suppressed: bool = True


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Signal(_CamelModel):
    level: SignalLevel
    code: str
    section: Section
    section_name: str
    message: str


class SectionTrend(_CamelModel):
    section: Section
    section_name: str
    structural_direction: TrendDirection = "insufficient_data"
    clarity_direction: TrendDirection = "insufficient_data"
    structural_delta: Optional[float] = None
    clarity_delta: Optional[float] = None


class SignalReport(_CamelModel):
    trend_inference_suppressed: bool = True
    section_trends: List[SectionTrend] = Field(default_factory=list)
    signals: List[Signal] = Field(default_factory=list)


class SubmissionResult(BaseModel):
    success: bool
    role: Optional[str] = None
    errors: List[str] = Field(default_factory=list)


class TrendsResponse(BaseModel):
    windows: List[TrendWindow] = Field(default_factory=list)
    trend_inference_suppressed: bool = True
    signals: List[Signal] = Field(default_factory=list)
    section_trends: List[SectionTrend] = Field(default_factory=list)

    def as_payload(self) -> Dict[str, Any]:
        return {
            "windows": [window.as_payload() for window in self.windows],
            "trendInferenceSuppressed": self.trend_inference_suppressed,
            "signals": [signal.model_dump(mode="json", by_alias=True) for signal in self.signals],
            "sectionTrends": [trend.model_dump(mode="json", by_alias=True) for trend in self.section_trends],
        }
