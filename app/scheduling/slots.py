"""
Dated bookable slots derived from the weekly template.

Each working slot is cut into fixed-length sessions starting at the slot's
start time. Sessions must fit before the slot ends and never straddle the
break; a session that would is moved to the end of the break. Sessions that
overlap an existing appointment are returned with ``is_available=False``.
"""
import datetime
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..schemas.availability import BookableTimeSlot, DaySchedule
from .weekly import DAYS_OF_WEEK, break_window, format_time, slot_bounds

BookedRange = Tuple[datetime.datetime, datetime.datetime]

def week_bounds(day: datetime.date) -> Tuple[datetime.date, datetime.date]:
    """Monday and Sunday of the week containing ``day``."""
    monday = day - datetime.timedelta(days=day.weekday())
    return monday, monday + datetime.timedelta(days=6)

def iter_dates(start: datetime.date, end: datetime.date) -> Iterator[datetime.date]:
    current = start
    while current <= end:
        yield current
        current += datetime.timedelta(days=1)

def _at(day: datetime.date, minutes: int) -> datetime.datetime:
    return datetime.datetime.combine(day, datetime.time(minutes // 60, minutes % 60))

def _is_booked(start: datetime.datetime, end: datetime.datetime, booked: Sequence[BookedRange]) -> bool:
    return any(b_start < end and start < b_end for b_start, b_end in booked)

def day_sessions(
    day: DaySchedule,
    duration_minutes: int,
) -> List[Tuple[int, int]]:
    """Session (start, end) minute pairs for one working day, in slot order."""
    sessions: List[Tuple[int, int]] = []
    if not day.is_working:
        return sessions

    for slot in day.slots:
        bounds = slot_bounds(slot)
        if bounds is None:
            continue
        window = break_window(slot)
        current = bounds[0]
        while current + duration_minutes <= bounds[1]:
            finish = current + duration_minutes
            if window and current < window[1] and window[0] < finish:
                current = window[1]
                continue
            sessions.append((current, finish))
            current = finish
    return sessions

def generate_time_slots(
    schedule: Mapping[str, DaySchedule],
    start: datetime.date,
    end: datetime.date,
    booked: Optional[Iterable[BookedRange]] = None,
    duration_minutes: int = 60,
) -> List[BookableTimeSlot]:
    """Expand the weekly template over ``[start, end]`` and mark booked sessions."""
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")
    booked_ranges = sorted(booked or [])

    slots: List[BookableTimeSlot] = []
    for current in iter_dates(start, end):
        day = schedule.get(DAYS_OF_WEEK[current.weekday()])
        if day is None:
            continue
        for session_start, session_end in day_sessions(day, duration_minutes):
            slots.append(BookableTimeSlot(
                date=current,
                time=format_time(session_start),
                end_time=format_time(session_end),
                is_available=not _is_booked(
                    _at(current, session_start), _at(current, session_end), booked_ranges
                ),
            ))
    return slots
