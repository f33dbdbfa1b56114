import datetime
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

class TimeSlot(BaseModel):
    """A time-of-day range within a working day, with an optional break."""
    model_config = ConfigDict(populate_by_name=True)
    
    start: str
    end: str
    break_start: Optional[str] = Field(default=None, alias="breakStart")
    break_end: Optional[str] = Field(default=None, alias="breakEnd")
    
    @field_validator("break_start", "break_end", mode="before")
    @classmethod
    def blank_break_is_unset(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class DaySchedule(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    
    is_working: bool = Field(default=False, alias="isWorking")
    slots: List[TimeSlot] = Field(default_factory=list)

class AvailabilityDocument(BaseModel):
    """Request body for replacing a practitioner's weekly availability."""
    schedule: Dict[str, DaySchedule]
    timezone: str
    
    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            # Directory names such as "Europe" raise IsADirectoryError
            raise ValueError(f"Unknown timezone: {v}")
        return v

class AvailabilityResponse(BaseModel):
    schedule: Optional[Dict[str, DaySchedule]] = None
    timezone: Optional[str] = None

class AvailabilityUpdateResponse(BaseModel):
    message: str
    availability: AvailabilityResponse

class BookableTimeSlot(BaseModel):
    """A dated session derived from the weekly template."""
    model_config = ConfigDict(populate_by_name=True)
    
    date: datetime.date
    time: str
    end_time: str = Field(alias="endTime")
    is_available: bool = Field(default=True, alias="isAvailable")

class AvailabilitySummary(BaseModel):
    weekly_hours: float
    working_days: int
    available_slots: int = 0
    total_slots: int = 0
