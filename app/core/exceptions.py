from typing import Optional

# Schedule (model-level) errors
class ScheduleError(ValueError):
    """Base class for errors raised while editing a weekly schedule."""

class UnknownDayError(ScheduleError):
    def __init__(self, day):
        super().__init__(f"Unknown day of week: {day!r}")
        self.day = day

class SlotIndexError(ScheduleError, IndexError):
    def __init__(self, day: str, index: int, size: int):
        super().__init__(
            f"{day} has {size} time slot(s); index {index} is out of range"
        )
        self.day = day
        self.index = index

class InvalidTimeRange(ScheduleError):
    """A time slot or break window that cannot be persisted."""

# External API errors
class AvailabilityAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class AvailabilityLoadError(AvailabilityAPIError):
    pass

class AvailabilitySaveError(AvailabilityAPIError):
    pass

# Editor lifecycle errors
class EditorStateError(RuntimeError):
    pass

class SaveInProgressError(EditorStateError):
    def __init__(self, detail: str = "A save is already in progress"):
        super().__init__(detail)
