"""Scheduling service: binds the calendar manager to stored tasks and categories."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.domains.scheduling.calendar import (
    CalendarEvent,
    CalendarManager,
    ScheduleSuggestion,
    TimeSlot,
)
from app.domains.task.service import TaskService
from app.exceptions.scheduling import SchedulingInputError
from app.schemas.scheduling import (
    AvailableSlotsRequest,
    CalendarEventSchema,
    ScheduleSuggestionRequest,
)

logger = logging.getLogger(__name__)


def to_calendar_events(events: list[CalendarEventSchema]) -> list[CalendarEvent]:
    return [CalendarEvent(**event.model_dump()) for event in events]


class SchedulingService:
    """Service class for slot search and schedule suggestions."""

    def __init__(self, db: AsyncSession | None = None, tz: str | None = None):
        self.db = db
        self.tz = tz if tz is not None else settings.scheduling_timezone

    def available_slots(self, request: AvailableSlotsRequest) -> list[TimeSlot]:
        """Slots over the requested range, free ones only unless asked otherwise."""
        manager = CalendarManager(to_calendar_events(request.calendar_events), tz=self.tz)
        args = (
            request.required_duration,
            request.start_date,
            request.end_date,
            request.schedules,
        )
        if request.include_unavailable:
            return manager.generate_time_slots(*args)
        return manager.find_available_time_slots(*args)

    async def suggest_for_task(
        self, task_id: UUID, user_id: UUID, request: ScheduleSuggestionRequest
    ) -> ScheduleSuggestion:
        """Suggest a slot for a stored task before its (or its project's) due date."""
        context = await TaskService(self.db).get_scheduling_context(task_id, user_id)

        if not context["duration"]:
            raise SchedulingInputError("Task has no estimated time")
        if not context["due_date"]:
            raise SchedulingInputError("Task has no due date")

        manager = CalendarManager(to_calendar_events(request.calendar_events), tz=self.tz)
        suggestion = manager.suggest_optimal_schedule(
            context["duration"],
            context["due_date"],
            context["schedules"],
            preferred_times=request.preferred_times,
        )
        logger.info(f"Suggested {suggestion.suggested_start} for task {task_id}")
        return suggestion
