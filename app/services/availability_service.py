from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List
import logging

from ..core.config import settings
from ..core.exceptions import ScheduleError
from ..models.practitioner import Practitioner
from ..models.appointment import Appointment, AppointmentStatus
from ..schemas.availability import AvailabilityDocument, BookableTimeSlot
from ..scheduling.weekly import WeeklyAvailabilityModel
from ..scheduling.slots import generate_time_slots

logger = logging.getLogger(__name__)

class AvailabilityService:
    def __init__(self, db: Session):
        self.db = db
    
    def get_practitioner(self, practitioner_id: int) -> Practitioner:
        practitioner = self.db.query(Practitioner).filter(
            Practitioner.id == practitioner_id
        ).first()
        
        if not practitioner:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Practitioner not found"
            )
        
        return practitioner
    
    def get_availability(self, practitioner: Practitioner) -> Dict[str, Any]:
        """Return the stored schedule, or an empty document if none was saved."""
        if not practitioner.availability:
            return {}
        
        # Stored documents may predate the current schedule shape
        model = WeeklyAvailabilityModel(practitioner.availability)
        return {
            "schedule": model.to_schedule(),
            "timezone": practitioner.timezone or settings.DEFAULT_TIMEZONE
        }
    
    def update_availability(
        self,
        practitioner: Practitioner,
        document: AvailabilityDocument
    ) -> Dict[str, Any]:
        """Validate and replace the practitioner's weekly schedule (last write wins)."""
        if not document.schedule:
            raise ScheduleError("Schedule must contain at least one day")
        
        model = WeeklyAvailabilityModel(document.schedule)
        model.validate(allow_overlaps=settings.ALLOW_OVERLAPPING_SLOTS)
        
        practitioner.availability = model.to_schedule()
        practitioner.timezone = document.timezone
        self.db.commit()
        self.db.refresh(practitioner)
        
        logger.info(
            f"Availability updated for practitioner {practitioner.id}: "
            f"{model.count_working_days()} working days, "
            f"{model.compute_weekly_hours():g}h/week ({document.timezone})"
        )
        
        return self.get_availability(practitioner)
    
    def get_time_slots(
        self,
        practitioner: Practitioner,
        start: date,
        end: date
    ) -> List[BookableTimeSlot]:
        """Bookable sessions between two dates (inclusive), reconciled against appointments."""
        if end < start:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="End date must not be before start date"
            )
        
        if (end - start).days + 1 > settings.MAX_SLOT_RANGE_DAYS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Date range may not exceed {settings.MAX_SLOT_RANGE_DAYS} days"
            )
        
        model = WeeklyAvailabilityModel(practitioner.availability)
        
        range_start = datetime.combine(start, time.min)
        range_end = datetime.combine(end + timedelta(days=1), time.min)
        appointments = self.db.query(Appointment).filter(
            Appointment.practitioner_id == practitioner.id,
            Appointment.status != AppointmentStatus.CANCELLED,
            Appointment.appointment_date < range_end,
            Appointment.end_time > range_start
        ).all()
        
        return generate_time_slots(
            model.days,
            start,
            end,
            booked=[(a.appointment_date, a.end_time) for a in appointments],
            duration_minutes=settings.SLOT_DURATION_MINUTES
        )
