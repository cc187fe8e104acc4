"""Scheduling schemas."""

from datetime import UTC, datetime

from pydantic import Field, field_validator, model_validator

from .base import BaseSchema
from .category import ScheduleWindow


class CalendarEventSchema(BaseSchema):
    """External calendar event already fetched by the client."""

    id: str | None = None
    title: str = ""
    start: datetime
    end: datetime
    description: str | None = None
    location: str | None = None
    is_all_day: bool = False
    source: str | None = None


class PreferredTime(BaseSchema):
    day_of_week: int = Field(..., ge=0, le=6)
    start_hour: int = Field(..., ge=0, le=24)
    end_hour: int = Field(..., ge=0, le=24)


class TimeSlotSchema(BaseSchema):
    start: datetime
    end: datetime
    duration: int
    is_available: bool
    conflicts: list[CalendarEventSchema] = []


class AvailableSlotsRequest(BaseSchema):
    """Stateless slot computation over a date range."""

    required_duration: int = Field(..., gt=0, description="Minutes")
    start_date: datetime
    end_date: datetime
    schedules: list[ScheduleWindow] = Field(default_factory=list)
    calendar_events: list[CalendarEventSchema] = Field(default_factory=list)
    include_unavailable: bool = False

    @field_validator("start_date", "end_date")
    @classmethod
    def to_naive_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is not None:
            return v.astimezone(UTC).replace(tzinfo=None)
        return v

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class ScheduleSuggestionRequest(BaseSchema):
    calendar_events: list[CalendarEventSchema] = Field(default_factory=list)
    preferred_times: list[PreferredTime] | None = None


class ScheduleSuggestionResponse(BaseSchema):
    suggested_start: datetime
    suggested_end: datetime
    reason: str
    alternative_slots: list[TimeSlotSchema] = []
