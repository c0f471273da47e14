# schemas.py

from datetime import date, datetime
from typing import Annotated, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    Field,
    PlainSerializer,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from scheduler.timeutil import parse_date, parse_hhmm, parse_iso_utc, to_iso_utc


# Aware UTC in, 'YYYY-MM-DDTHH:MM:SS.mmmZ' out
UtcTimestamp = Annotated[
    datetime,
    BeforeValidator(parse_iso_utc),
    PlainSerializer(to_iso_utc, return_type=str),
]


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase JSON (startTime, isFatigued, ...)."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


# -----------------------------
# Events
# -----------------------------
class CalendarEvent(CamelModel):
    """A stored event. Immutable; the store assigns id and created_at."""

    id: str
    title: str
    start_time: UtcTimestamp
    end_time: UtcTimestamp
    created_at: UtcTimestamp

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }


class EventCreate(CamelModel):
    """Payload for booking a new event."""

    title: str
    start_time: UtcTimestamp
    end_time: UtcTimestamp

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    # Ensure valid time window
    @model_validator(mode="after")
    def _validate_time_window(self):
        if not (self.end_time > self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class DayEvents(CamelModel):
    date: date
    count: int
    events: List[CalendarEvent]
    is_empty: bool
    reasoning: str


# -----------------------------
# Scheduling
# -----------------------------
def _normalize_hhmm(v):
    if v is None or v == "":
        return None
    return parse_hhmm(v).strftime("%H:%M")


class SchedulingIntent(CamelModel):
    """Structured reading of a free-text scheduling request."""

    title: str
    date: date
    preferred_time: Optional[str] = None     # local 'HH:MM'
    duration_minutes: int = Field(gt=0)
    is_fatigued: bool = False
    reasoning: str = ""

    @field_validator("preferred_time", mode="before")
    @classmethod
    def _check_time(cls, v):
        return _normalize_hhmm(v)

    @computed_field
    @property
    def has_specific_time(self) -> bool:
        return self.preferred_time is not None


class SlotRequest(CamelModel):
    """Input of find_best_slot; accepts 'duration' as an alias of durationMinutes."""

    date: date
    duration_minutes: int = Field(
        gt=0,
        validation_alias=AliasChoices("durationMinutes", "duration", "duration_minutes"),
    )
    preferred_time: Optional[str] = None
    is_fatigued: bool = False

    @field_validator("preferred_time", mode="before")
    @classmethod
    def _check_time(cls, v):
        return _normalize_hhmm(v)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v):
        return parse_date(v)

    @field_validator("is_fatigued", mode="before")
    @classmethod
    def _none_is_false(cls, v):
        return False if v is None else v


class SolveResult(CamelModel):
    """
    Outcome of a solve. `reasoning` is always present and is shown to the
    user verbatim; on success it names the local start time ("2:00 PM").
    """

    success: bool
    start_time: Optional[UtcTimestamp] = None
    end_time: Optional[UtcTimestamp] = None
    start_time_local: Optional[str] = None
    end_time_local: Optional[str] = None
    score: Optional[float] = None
    reasoning: str


class ScheduleOutcome(CamelModel):
    """analyze -> solve -> book, as one response."""

    intent: SchedulingIntent
    result: SolveResult
    event: Optional[CalendarEvent] = None
