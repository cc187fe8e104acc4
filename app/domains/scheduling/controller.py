"""Scheduling API controller with FastAPI endpoints."""

import logging

from fastapi import APIRouter, Body, Depends

from app.core.dependencies import get_identity
from app.domains.scheduling.service import SchedulingService
from app.schemas.base import ResponseSchema
from app.schemas.scheduling import AvailableSlotsRequest, TimeSlotSchema

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/scheduling",
    tags=["scheduling"],
    dependencies=[Depends(get_identity)],  # Global token validation for all routes
)


@router.post("/available-slots", response_model=ResponseSchema)
async def available_slots(payload: AvailableSlotsRequest = Body(...)):
    """Compute time slots from the supplied windows and calendar events."""
    slots = SchedulingService().available_slots(payload)

    return ResponseSchema(
        status="success",
        message="Available slots retrieved successfully",
        data=[TimeSlotSchema.model_validate(slot).model_dump(mode="json") for slot in slots],
    )
