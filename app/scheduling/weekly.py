"""
Recurring weekly availability.

A practitioner's availability is a template keyed by day-of-week name.
Each day is either off (no slots) or working with one or more time slots,
and every slot may carry a single break window. Times are ``HH:MM`` strings
on a 24h clock and are only validated when the schedule is about to be
persisted, so an editor can hold half-typed values in the meantime.
"""
import logging
import re
from collections.abc import Mapping
from typing import Any, Dict, Optional, Tuple, Union

from ..core.exceptions import (
    InvalidTimeRange, ScheduleError, SlotIndexError, UnknownDayError
)
from ..schemas.availability import DaySchedule, TimeSlot

logger = logging.getLogger(__name__)

DAYS_OF_WEEK = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
]
DEFAULT_WORKING_DAYS = DAYS_OF_WEEK[:5]

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# Accepted field names for update_time_slot, mapped to TimeSlot attributes
_SLOT_FIELDS = {
    "start": "start",
    "end": "end",
    "breakStart": "break_start",
    "break_start": "break_start",
    "breakEnd": "break_end",
    "break_end": "break_end",
}

SlotInput = Union[TimeSlot, Mapping]

def parse_time(value: Any) -> Optional[int]:
    """Return minutes since midnight for an ``HH:MM`` string, or None."""
    if not isinstance(value, str):
        return None
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))

def format_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"

def default_time_slot() -> TimeSlot:
    """09:00-17:00 with a 13:00-14:00 break."""
    return TimeSlot(start="09:00", end="17:00", break_start="13:00", break_end="14:00")

def default_schedule() -> Dict[str, DaySchedule]:
    """Monday to Friday on the default slot, weekend off."""
    return {
        day: DaySchedule(
            is_working=day in DEFAULT_WORKING_DAYS,
            slots=[default_time_slot()] if day in DEFAULT_WORKING_DAYS else [],
        )
        for day in DAYS_OF_WEEK
    }

def normalize_day(day: Any) -> str:
    if isinstance(day, str):
        name = day.strip().capitalize()
        if name in DAYS_OF_WEEK:
            return name
    raise UnknownDayError(day)

def slot_bounds(slot: TimeSlot) -> Optional[Tuple[int, int]]:
    """(start, end) in minutes, or None when unparseable or not increasing."""
    start = parse_time(slot.start)
    end = parse_time(slot.end)
    if start is None or end is None or end <= start:
        return None
    return start, end

def break_window(slot: TimeSlot) -> Optional[Tuple[int, int]]:
    """
    The slot's break clipped to the slot itself.

    Returns None when the slot or break is unset, unparseable, inverted or
    lies entirely outside the slot.
    """
    bounds = slot_bounds(slot)
    break_start = parse_time(slot.break_start)
    break_end = parse_time(slot.break_end)
    if bounds is None or break_start is None or break_end is None:
        return None
    break_start = max(break_start, bounds[0])
    break_end = min(break_end, bounds[1])
    if break_end <= break_start:
        return None
    return break_start, break_end

def slot_minutes(slot: TimeSlot) -> int:
    """Bookable minutes in a slot, never negative."""
    bounds = slot_bounds(slot)
    if bounds is None:
        return 0
    minutes = bounds[1] - bounds[0]
    window = break_window(slot)
    if window:
        minutes -= window[1] - window[0]
    return minutes

def overlaps(a: TimeSlot, b: TimeSlot) -> bool:
    a_bounds = slot_bounds(a)
    b_bounds = slot_bounds(b)
    if a_bounds is None or b_bounds is None:
        return False
    return a_bounds[0] < b_bounds[1] and b_bounds[0] < a_bounds[1]

def _as_time_slot(slot: SlotInput) -> TimeSlot:
    if isinstance(slot, TimeSlot):
        return slot.model_copy(deep=True)
    return TimeSlot.model_validate(dict(slot))

def _coerce_day(entry: Any) -> DaySchedule:
    if isinstance(entry, DaySchedule):
        day = entry.model_copy(deep=True)
    elif isinstance(entry, Mapping) and (
        "slots" in entry or "isWorking" in entry or "is_working" in entry
    ):
        day = DaySchedule.model_validate(dict(entry))
    elif isinstance(entry, Mapping):
        # Flat legacy shape: {"start": ..., "end": ..., "available": bool}
        working = bool(entry.get("available", True))
        slots = []
        if working and entry.get("start") and entry.get("end"):
            slots.append(TimeSlot(start=entry["start"], end=entry["end"]))
        day = DaySchedule(is_working=working, slots=slots)
    else:
        raise ScheduleError(f"Unsupported day entry: {entry!r}")

    if not day.is_working:
        day.slots = []
    return day

def coerce_schedule(raw: Any) -> Dict[str, DaySchedule]:
    """
    Normalize a stored or received schedule into ``{day: DaySchedule}``.

    Accepts the current ``{day: {isWorking, slots}}`` shape, the flat
    ``{day: {start, end, available}}`` shape and the list-of-entries shape
    ``[{day, startTime, endTime, isAvailable, breakStartTime, breakEndTime}]``.
    Day names are case-insensitive. Returns an empty dict for empty input.
    """
    if not raw:
        return {}

    if isinstance(raw, Mapping):
        return {normalize_day(day): _coerce_day(entry) for day, entry in raw.items()}

    if isinstance(raw, (list, tuple)):
        schedule: Dict[str, DaySchedule] = {}
        for entry in raw:
            if not isinstance(entry, Mapping):
                raise ScheduleError(f"Unsupported availability entry: {entry!r}")
            day = schedule.setdefault(normalize_day(entry.get("day")), DaySchedule())
            if not entry.get("isAvailable", True):
                continue
            day.is_working = True
            day.slots.append(TimeSlot(
                start=entry.get("startTime", ""),
                end=entry.get("endTime", ""),
                break_start=entry.get("breakStartTime") or None,
                break_end=entry.get("breakEndTime") or None,
            ))
        return schedule

    raise ScheduleError(f"Unsupported schedule format: {type(raw).__name__}")

def validate_slot(day: str, index: int, slot: TimeSlot) -> None:
    """Raise InvalidTimeRange unless the slot can be persisted."""
    where = f"{day} slot {index + 1}"
    start = parse_time(slot.start)
    end = parse_time(slot.end)
    if start is None or end is None:
        raise InvalidTimeRange(f"{where}: times must be HH:MM (got {slot.start!r}-{slot.end!r})")
    if start >= end:
        raise InvalidTimeRange(f"{where}: start {slot.start} must be before end {slot.end}")

    if slot.break_start is None and slot.break_end is None:
        return
    if slot.break_start is None or slot.break_end is None:
        raise InvalidTimeRange(f"{where}: a break needs both a start and an end")

    break_start = parse_time(slot.break_start)
    break_end = parse_time(slot.break_end)
    if break_start is None or break_end is None:
        raise InvalidTimeRange(
            f"{where}: break times must be HH:MM (got {slot.break_start!r}-{slot.break_end!r})"
        )
    if break_start >= break_end:
        raise InvalidTimeRange(
            f"{where}: break start {slot.break_start} must be before break end {slot.break_end}"
        )
    if break_start < start or break_end > end:
        raise InvalidTimeRange(
            f"{where}: break {slot.break_start}-{slot.break_end} must lie within {slot.start}-{slot.end}"
        )

class WeeklyAvailabilityModel:
    """
    In-memory weekly availability template.

    All editing operations are synchronous and mutate the model in place.
    Use ``copy()`` to obtain an independent scratch copy for editing.
    """

    def __init__(self, document: Any = None):
        self.days: Dict[str, DaySchedule] = {}
        self.load(document)

    def load(self, document: Any = None) -> None:
        """
        Replace the whole schedule.

        ``document`` may be a ``{"schedule": ..., "timezone": ...}`` payload
        or a bare schedule. Absent or empty input yields the default schedule.
        """
        raw = document
        if isinstance(document, Mapping) and (
            "schedule" in document or "timezone" in document
        ):
            raw = document.get("schedule")

        schedule = coerce_schedule(raw)
        if not schedule:
            logger.debug("No stored schedule, using defaults")
            schedule = default_schedule()

        self.days = {day: schedule.get(day, DaySchedule()) for day in DAYS_OF_WEEK}

    def day(self, day: str) -> DaySchedule:
        return self.days[normalize_day(day)]

    def _slot_index(self, day: str, index: int) -> Tuple[DaySchedule, int]:
        name = normalize_day(day)
        entry = self.days[name]
        if not isinstance(index, int) or not 0 <= index < len(entry.slots):
            raise SlotIndexError(name, index, len(entry.slots))
        return entry, index

    def toggle_working_day(self, day: str) -> DaySchedule:
        """Flip a day on or off. Turning a day on resets it to the default slot."""
        entry = self.day(day)
        entry.is_working = not entry.is_working
        entry.slots = [default_time_slot()] if entry.is_working else []
        return entry

    def add_time_slot(self, day: str, slot: Optional[SlotInput] = None) -> TimeSlot:
        """Append a slot (the default slot when none is given). Overlaps are allowed."""
        entry = self.day(day)
        if not entry.is_working:
            raise ScheduleError(f"{normalize_day(day)} is not a working day")
        new_slot = default_time_slot() if slot is None else _as_time_slot(slot)
        entry.slots.append(new_slot)
        return new_slot

    def remove_time_slot(self, day: str, index: int) -> TimeSlot:
        entry, index = self._slot_index(day, index)
        return entry.slots.pop(index)

    def update_time_slot(self, day: str, index: int, field: str, value: Optional[str]) -> TimeSlot:
        """Set one field of a slot. Values are not range-checked until ``validate``."""
        attribute = _SLOT_FIELDS.get(field)
        if attribute is None:
            raise ScheduleError(f"Unknown time slot field: {field!r}")
        entry, index = self._slot_index(day, index)
        slot = entry.slots[index]
        if attribute in ("break_start", "break_end") and not value:
            value = None
        setattr(slot, attribute, value)
        return slot

    def copy_schedule(self, from_day: str, to_day: str) -> DaySchedule:
        source = normalize_day(from_day)
        target = normalize_day(to_day)
        if source != target:
            self.days[target] = self.days[source].model_copy(deep=True)
        return self.days[target]

    def compute_weekly_hours(self) -> float:
        """
        Total bookable hours per week.

        Each slot contributes ``end - start`` minus its break, with the break
        clipped to the slot. Unparseable or inverted slots contribute nothing.
        """
        minutes = sum(
            slot_minutes(slot)
            for entry in self.days.values() if entry.is_working
            for slot in entry.slots
        )
        return minutes / 60.0

    def count_working_days(self) -> int:
        return sum(1 for entry in self.days.values() if entry.is_working)

    def validate(self, allow_overlaps: bool = True) -> None:
        """Raise InvalidTimeRange or ScheduleError if the schedule can't be persisted."""
        for name, entry in self.days.items():
            if not entry.is_working:
                continue
            if not entry.slots:
                raise ScheduleError(f"{name} is a working day but has no time slots")
            for index, slot in enumerate(entry.slots):
                validate_slot(name, index, slot)
            if allow_overlaps:
                continue
            for i, first in enumerate(entry.slots):
                for j in range(i + 1, len(entry.slots)):
                    if overlaps(first, entry.slots[j]):
                        raise InvalidTimeRange(
                            f"{name}: slot {i + 1} overlaps slot {j + 1}"
                        )

    def to_schedule(self) -> Dict[str, Dict[str, Any]]:
        """Wire-format schedule (camelCase keys, unset breaks omitted)."""
        return {
            day: entry.model_dump(by_alias=True, exclude_none=True)
            for day, entry in self.days.items()
        }

    def save(self, timezone: str) -> Dict[str, Any]:
        """Serialize the schedule with the caller's display timezone attached."""
        return {"schedule": self.to_schedule(), "timezone": timezone}

    def copy(self) -> "WeeklyAvailabilityModel":
        clone = WeeklyAvailabilityModel.__new__(WeeklyAvailabilityModel)
        clone.days = {day: entry.model_copy(deep=True) for day, entry in self.days.items()}
        return clone

    def __eq__(self, other):
        if not isinstance(other, WeeklyAvailabilityModel):
            return NotImplemented
        return self.to_schedule() == other.to_schedule()

    def __repr__(self):
        return (
            f"<WeeklyAvailabilityModel(working_days={self.count_working_days()}, "
            f"weekly_hours={self.compute_weekly_hours()})>"
        )
