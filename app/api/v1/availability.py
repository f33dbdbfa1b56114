from fastapi import APIRouter, Depends, Query
from datetime import date
from typing import List

from ...api.deps import (
    get_availability_service, get_practitioner, rate_limit_check
)
from ...services.availability_service import AvailabilityService
from ...schemas.availability import (
    AvailabilityDocument, AvailabilityResponse, AvailabilityUpdateResponse,
    BookableTimeSlot
)
from ...models.practitioner import Practitioner

router = APIRouter(prefix="/practitioners", tags=["Availability"])

@router.get(
    "/{practitioner_id}/availability",
    response_model=AvailabilityResponse,
    response_model_exclude_none=True
)
async def get_availability(
    practitioner: Practitioner = Depends(get_practitioner),
    service: AvailabilityService = Depends(get_availability_service)
):
    """Get the practitioner's recurring weekly availability."""
    return service.get_availability(practitioner)

@router.put(
    "/{practitioner_id}/availability",
    response_model=AvailabilityUpdateResponse,
    response_model_exclude_none=True
)
async def update_availability(
    document: AvailabilityDocument,
    practitioner: Practitioner = Depends(get_practitioner),
    service: AvailabilityService = Depends(get_availability_service),
    _: None = Depends(rate_limit_check)
):
    """Replace the practitioner's weekly availability."""
    availability = service.update_availability(practitioner, document)
    
    return {
        "message": "Availability updated successfully",
        "availability": availability
    }

@router.get("/{practitioner_id}/time-slots", response_model=List[BookableTimeSlot])
async def get_time_slots(
    start: date = Query(..., description="First date, YYYY-MM-DD"),
    end: date = Query(..., description="Last date (inclusive), YYYY-MM-DD"),
    practitioner: Practitioner = Depends(get_practitioner),
    service: AvailabilityService = Depends(get_availability_service)
):
    """List dated bookable sessions with their availability."""
    return service.get_time_slots(practitioner, start, end)
