import pytest

from app.core.exceptions import (
    InvalidTimeRange, ScheduleError, SlotIndexError, UnknownDayError
)
from app.schemas.availability import TimeSlot
from app.scheduling.weekly import (
    DAYS_OF_WEEK, WeeklyAvailabilityModel, coerce_schedule, default_time_slot,
    overlaps, parse_time, slot_minutes
)

DEFAULT_SLOT = {"start": "09:00", "end": "17:00", "breakStart": "13:00", "breakEnd": "14:00"}

def all_days_off():
    return {day: {"isWorking": False, "slots": []} for day in DAYS_OF_WEEK}

@pytest.fixture
def model():
    return WeeklyAvailabilityModel()

class TestDefaults:

    def test_default_schedule_hours(self, model):
        """Five days of 8h minus a 1h break."""
        assert model.compute_weekly_hours() == 35.0

    def test_default_schedule_working_days(self, model):
        assert model.count_working_days() == 5
        assert not model.day("Saturday").is_working
        assert model.day("Sunday").slots == []

    def test_load_empty_falls_back_to_default(self):
        for empty in (None, {}, {"schedule": None}, {"schedule": {}}, []):
            assert WeeklyAvailabilityModel(empty) == WeeklyAvailabilityModel()

    def test_default_slot_is_not_shared(self, model):
        model.update_time_slot("Monday", 0, "start", "08:00")
        assert model.day("Tuesday").slots[0].start == "09:00"
        assert default_time_slot().start == "09:00"

class TestToggleWorkingDay:

    def test_toggle_on_adds_default_slot(self):
        model = WeeklyAvailabilityModel(all_days_off())
        model.toggle_working_day("Wednesday")

        wednesday = model.day("Wednesday")
        assert wednesday.is_working
        assert len(wednesday.slots) == 1
        assert wednesday.slots[0].model_dump(by_alias=True) == DEFAULT_SLOT
        assert model.compute_weekly_hours() == 7.0

    def test_toggle_off_clears_slots(self, model):
        model.add_time_slot("Monday", {"start": "18:00", "end": "20:00"})
        model.toggle_working_day("Monday")

        assert not model.day("Monday").is_working
        assert model.day("Monday").slots == []

    def test_double_toggle_resets_slots(self, model):
        """Toggling twice restores the flag but resets slots to the default."""
        model.update_time_slot("Monday", 0, "end", "12:00")
        model.toggle_working_day("Monday")
        model.toggle_working_day("Monday")

        monday = model.day("Monday")
        assert monday.is_working
        assert [s.model_dump(by_alias=True) for s in monday.slots] == [DEFAULT_SLOT]

    def test_non_working_days_never_have_slots(self, model):
        for day in ("Monday", "Saturday", "Monday", "Friday"):
            model.toggle_working_day(day)
        model.copy_schedule("Sunday", "Tuesday")

        for day in DAYS_OF_WEEK:
            entry = model.day(day)
            if not entry.is_working:
                assert entry.slots == []

    def test_day_names_are_case_insensitive(self, model):
        model.toggle_working_day("saturday")
        assert model.day("Saturday").is_working

    def test_unknown_day(self, model):
        with pytest.raises(UnknownDayError):
            model.toggle_working_day("Funday")

class TestSlotEditing:

    def test_add_slot_appends(self, model):
        model.add_time_slot("Monday", {"start": "18:00", "end": "20:00"})
        slots = model.day("Monday").slots
        assert len(slots) == 2
        assert slots[1].start == "18:00"
        assert slots[1].break_start is None

    def test_add_default_slot(self, model):
        slot = model.add_time_slot("Monday")
        assert slot == default_time_slot()

    def test_add_slot_allows_overlap(self, model):
        model.add_time_slot("Monday", {"start": "10:00", "end": "11:00"})
        assert len(model.day("Monday").slots) == 2

    def test_add_slot_copies_input(self, model):
        slot = TimeSlot(start="18:00", end="19:00")
        model.add_time_slot("Monday", slot)
        slot.start = "06:00"
        assert model.day("Monday").slots[1].start == "18:00"

    def test_add_slot_to_day_off(self, model):
        with pytest.raises(ScheduleError):
            model.add_time_slot("Sunday")

    def test_remove_then_add_appends_at_end(self, model):
        model.add_time_slot("Monday", {"start": "18:00", "end": "19:00"})
        model.add_time_slot("Monday", {"start": "19:00", "end": "20:00"})

        model.remove_time_slot("Monday", 0)
        model.add_time_slot("Monday", {"start": "07:00", "end": "08:00"})

        starts = [s.start for s in model.day("Monday").slots]
        assert starts == ["18:00", "19:00", "07:00"]

    def test_remove_out_of_range(self, model):
        with pytest.raises(SlotIndexError):
            model.remove_time_slot("Monday", 1)
        with pytest.raises(IndexError):
            model.remove_time_slot("Monday", -1)
        with pytest.raises(SlotIndexError):
            model.remove_time_slot("Sunday", 0)

    def test_update_does_not_validate(self, model):
        model.update_time_slot("Monday", 0, "start", "18:00")
        assert model.day("Monday").slots[0].start == "18:00"

    def test_update_accepts_snake_case_fields(self, model):
        model.update_time_slot("Monday", 0, "break_end", "13:30")
        assert model.day("Monday").slots[0].break_end == "13:30"

    def test_update_blank_break_clears_it(self, model):
        model.update_time_slot("Monday", 0, "breakStart", "")
        model.update_time_slot("Monday", 0, "breakEnd", "")
        assert model.compute_weekly_hours() == 36.0

    def test_update_unknown_field(self, model):
        with pytest.raises(ScheduleError):
            model.update_time_slot("Monday", 0, "colour", "red")

    def test_update_out_of_range(self, model):
        with pytest.raises(SlotIndexError):
            model.update_time_slot("Monday", 3, "start", "10:00")

class TestCopySchedule:

    def test_copy_is_deep(self, model):
        model.update_time_slot("Monday", 0, "start", "08:00")
        model.copy_schedule("Monday", "Tuesday")
        model.update_time_slot("Tuesday", 0, "start", "10:30")

        assert model.day("Monday").slots[0].start == "08:00"
        assert model.day("Tuesday").slots[0].start == "10:30"

    def test_copy_replaces_working_flag(self, model):
        model.copy_schedule("Monday", "Saturday")
        assert model.day("Saturday").is_working
        assert model.count_working_days() == 6

        model.copy_schedule("Sunday", "Monday")
        assert not model.day("Monday").is_working
        assert model.day("Monday").slots == []

    def test_copy_onto_itself(self, model):
        model.copy_schedule("Monday", "monday")
        assert model == WeeklyAvailabilityModel()

class TestWeeklyHours:

    def test_shortened_slot_clips_break(self, model):
        """A break entirely outside the slot subtracts nothing."""
        model.update_time_slot("Monday", 0, "end", "13:00")
        assert model.compute_weekly_hours() == 28.0 + 4.0

    def test_partially_outside_break(self):
        slot = TimeSlot(start="09:00", end="13:30", break_start="13:00", break_end="14:00")
        assert slot_minutes(slot) == 4 * 60

    def test_inverted_break_is_ignored(self):
        slot = TimeSlot(start="09:00", end="17:00", break_start="14:00", break_end="13:00")
        assert slot_minutes(slot) == 8 * 60

    def test_invalid_slot_counts_zero(self, model):
        model.update_time_slot("Monday", 0, "start", "nine")
        model.update_time_slot("Tuesday", 0, "start", "18:00")
        assert model.compute_weekly_hours() == 21.0

    def test_split_sessions(self):
        model = WeeklyAvailabilityModel(all_days_off())
        model.toggle_working_day("Thursday")
        model.update_time_slot("Thursday", 0, "end", "12:00")
        model.update_time_slot("Thursday", 0, "breakStart", None)
        model.update_time_slot("Thursday", 0, "breakEnd", None)
        model.add_time_slot("Thursday", {"start": "16:30", "end": "20:00"})

        assert model.compute_weekly_hours() == 6.5
        assert model.count_working_days() == 1

class TestValidation:

    def test_default_is_valid(self, model):
        model.validate()

    def test_end_before_start(self, model):
        model.update_time_slot("Monday", 0, "end", "08:00")
        with pytest.raises(InvalidTimeRange):
            model.validate()

    def test_break_outside_slot(self, model):
        model.update_time_slot("Monday", 0, "end", "13:00")
        with pytest.raises(InvalidTimeRange):
            model.validate()

    def test_half_break(self, model):
        model.update_time_slot("Monday", 0, "breakEnd", None)
        with pytest.raises(InvalidTimeRange, match="both"):
            model.validate()

    def test_malformed_time(self, model):
        model.update_time_slot("Monday", 0, "start", "9am")
        with pytest.raises(InvalidTimeRange):
            model.validate()

    def test_working_day_without_slots(self, model):
        model.remove_time_slot("Monday", 0)
        with pytest.raises(ScheduleError):
            model.validate()

    def test_overlaps_rejected_only_when_disallowed(self, model):
        model.add_time_slot("Monday", {"start": "16:00", "end": "18:00"})
        model.validate()
        with pytest.raises(InvalidTimeRange, match="overlaps"):
            model.validate(allow_overlaps=False)

    def test_adjacent_slots_do_not_overlap(self):
        assert not overlaps(
            TimeSlot(start="09:00", end="12:00"), TimeSlot(start="12:00", end="15:00")
        )
        assert overlaps(
            TimeSlot(start="09:00", end="12:01"), TimeSlot(start="12:00", end="15:00")
        )

class TestSerialization:

    def test_save_attaches_timezone(self, model):
        document = model.save("Asia/Kolkata")
        assert document["timezone"] == "Asia/Kolkata"
        assert document["schedule"]["Monday"] == {"isWorking": True, "slots": [DEFAULT_SLOT]}
        assert document["schedule"]["Sunday"] == {"isWorking": False, "slots": []}

    def test_load_saved_document(self, model):
        model.toggle_working_day("Saturday")
        restored = WeeklyAvailabilityModel(model.save("UTC"))
        assert restored == model
        assert restored.count_working_days() == 6

    def test_document_without_schedule_uses_defaults(self):
        assert WeeklyAvailabilityModel({"timezone": "UTC"}) == WeeklyAvailabilityModel()

    def test_missing_days_are_off(self):
        model = WeeklyAvailabilityModel({"Monday": {"isWorking": True, "slots": [DEFAULT_SLOT]}})
        assert model.count_working_days() == 1
        assert list(model.days) == DAYS_OF_WEEK

    def test_copy_is_independent(self, model):
        clone = model.copy()
        clone.toggle_working_day("Monday")
        assert model.day("Monday").is_working
        assert clone != model

    def test_flat_legacy_shape(self):
        model = WeeklyAvailabilityModel({
            "monday": {"start": "09:00", "end": "17:00", "available": True},
            "saturday": {"start": "10:00", "end": "14:00", "available": True},
            "sunday": {"start": "00:00", "end": "00:00", "available": False},
        })
        assert model.count_working_days() == 2
        assert model.compute_weekly_hours() == 12.0

    def test_list_legacy_shape(self):
        schedule = coerce_schedule([
            {"day": "Tuesday", "startTime": "09:00", "endTime": "12:00"},
            {"day": "Tuesday", "startTime": "14:00", "endTime": "18:00",
             "breakStartTime": "16:00", "breakEndTime": "16:30"},
            {"day": "Friday", "startTime": "09:00", "endTime": "12:00", "isAvailable": False},
        ])
        assert schedule["Tuesday"].is_working
        assert len(schedule["Tuesday"].slots) == 2
        assert not schedule["Friday"].is_working
        assert WeeklyAvailabilityModel(schedule).compute_weekly_hours() == 6.5

    def test_unknown_day_key(self):
        with pytest.raises(UnknownDayError):
            WeeklyAvailabilityModel({"Someday": {"isWorking": False, "slots": []}})

class TestParseTime:

    @pytest.mark.parametrize("value,expected", [
        ("00:00", 0), ("09:30", 570), ("23:59", 1439), (" 13:00 ", 780),
        ("24:00", None), ("9:30", None), ("", None), (None, None), ("12:60", None),
    ])
    def test_parse_time(self, value, expected):
        assert parse_time(value) == expected
