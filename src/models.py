"""
Entry and result models
=======================
pydantic models for the combined sleep + wellbeing entry and for every
read-only object derived from it (Summary, CorrelationResult, chart series,
InsightReport).

Python attributes are snake_case; the wire form is camelCase
(``wakeUpTime``, ``qualityRating``...). Both spellings are accepted on input.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from errors import ValidationError


class Mood(str, Enum):
    HAPPY = "Happy"
    EXCITED = "Excited"
    NEUTRAL = "Neutral"
    TIRED = "Tired"
    STRESSED = "Stressed"
    SAD = "Sad"


# Tired and Stressed share a weight.
MOOD_VALUES: Dict[str, int] = {
    Mood.HAPPY.value: 5,
    Mood.EXCITED.value: 4,
    Mood.NEUTRAL.value: 3,
    Mood.TIRED.value: 2,
    Mood.STRESSED.value: 2,
    Mood.SAD.value: 1,
}


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _calendar_date(value: Any) -> Any:
    """Reduce datetimes / ISO datetime strings to their calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[10] in ("T", " "):
        return value[:10]
    return value


def _aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def _check_interval(bedtime: datetime, wake_up_time: datetime) -> None:
    """bedtime and wake_up_time must both carry an offset, or neither."""
    if _aware(bedtime) != _aware(wake_up_time):
        raise ValueError("bedtime and wakeUpTime must both include a timezone offset or both omit it")


# ─── Entry ─────────────────────────────────────────────────

class Entry(CamelModel):
    """One user's combined sleep + wellbeing record for a calendar day."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    user_id: Optional[str] = None
    bedtime: datetime
    wake_up_time: datetime
    duration_hours: Optional[StrictFloat] = None
    quality_rating: StrictInt = Field(ge=1, le=10)
    sleep_comments: Optional[str] = None
    entry_date: date
    day_rating: Optional[StrictInt] = Field(default=None, ge=1, le=10)
    mood: Optional[str] = None
    day_comments: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        # uuid columns come back as uuid.UUID
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("entry_date", mode="before")
    @classmethod
    def _entry_date_is_calendar_day(cls, value: Any) -> Any:
        return _calendar_date(value)

    @model_validator(mode="after")
    def _interval_is_comparable(self) -> "Entry":
        _check_interval(self.bedtime, self.wake_up_time)
        return self


class EntryCreate(CamelModel):
    """A journal submission on the write path (legacy migration, imports)."""

    user_id: str
    bedtime: datetime
    wake_up_time: datetime
    duration_hours: Optional[float] = Field(default=None, ge=0)
    quality_rating: StrictInt = Field(ge=1, le=10)
    sleep_comments: Optional[str] = None
    entry_date: date
    day_rating: StrictInt = Field(ge=1, le=10)
    mood: Optional[Mood] = None
    day_comments: Optional[str] = None

    @field_validator("entry_date", mode="before")
    @classmethod
    def _entry_date_is_calendar_day(cls, value: Any) -> Any:
        return _calendar_date(value)

    @model_validator(mode="after")
    def _fill_duration(self) -> "EntryCreate":
        _check_interval(self.bedtime, self.wake_up_time)
        if self.duration_hours is None:
            delta = self.wake_up_time - self.bedtime
            if delta < timedelta(0):
                delta += timedelta(hours=24)
            self.duration_hours = round(delta.total_seconds() / 3600.0, 2)
        return self


def validate_submission(payload: Dict[str, Any]) -> EntryCreate:
    """Validate a raw submission, naming offending fields on failure."""
    try:
        return EntryCreate.model_validate(payload)
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors() if err["loc"]})
        raise ValidationError(
            "Entry submission failed validation.",
            fields=fields,
            details=[{"field": ".".join(str(p) for p in err["loc"]), "error": err["msg"]} for err in e.errors()],
        ) from e


# ─── Summary ───────────────────────────────────────────────

class SleepSummaryDay(CamelModel):
    date: str
    quality_rating: int


class Summary(CamelModel):
    average_sleep_duration_hours: Optional[float] = None
    average_day_rating: Optional[float] = None
    best_sleep_days: List[SleepSummaryDay] = Field(default_factory=list)
    worst_sleep_days: List[SleepSummaryDay] = Field(default_factory=list)


# ─── Correlation ───────────────────────────────────────────

class CorrelationDataPoint(CamelModel):
    sleep_duration: float
    day_rating: float
    date: str


class CorrelationResult(CamelModel):
    correlation_coefficient: float = 0.0
    data_points: List[CorrelationDataPoint] = Field(default_factory=list)


# ─── Charts ────────────────────────────────────────────────

class MoodChartItem(CamelModel):
    date: str
    mood_value: int
    mood: Optional[str] = None


class SleepChartItem(CamelModel):
    date: str
    sleep_duration: float


class ChartSeries(CamelModel):
    mood_chart_data: List[MoodChartItem] = Field(default_factory=list)
    sleep_duration_chart_data: List[SleepChartItem] = Field(default_factory=list)
    correlation_chart_data: List[CorrelationDataPoint] = Field(default_factory=list)


class ChartsData(ChartSeries):
    narrated_insight: str = ""


class InsightReport(CamelModel):
    summary: Summary
    correlation: CorrelationResult
    correlation_strength: str = "negligible"
    charts: ChartSeries
    narrated_insight: str
    narration_status: str = "ok"
