"""
Viewing/editing lifecycle for a practitioner's weekly availability.

An ``AvailabilityEditor`` is owned by whatever page or session displays
the schedule. It keeps the last saved schedule, and while editing a
scratch copy that is only promoted once the API has accepted it.
"""
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional
import logging

from ..core.config import settings
from ..core.exceptions import (
    AvailabilityAPIError, AvailabilitySaveError, EditorStateError,
    SaveInProgressError
)
from ..schemas.availability import AvailabilitySummary, BookableTimeSlot
from ..scheduling.slots import week_bounds
from ..scheduling.weekly import WeeklyAvailabilityModel
from .availability_client import AvailabilityClient

logger = logging.getLogger(__name__)

LOAD_ERROR_NOTICE = "Error loading availability; showing the default schedule"
SAVE_ERROR_NOTICE = "Error saving availability; your changes have been kept"

class EditorMode(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"

class AvailabilityEditor:
    def __init__(
        self,
        client: AvailabilityClient,
        timezone: Optional[str] = None,
        allow_overlaps: Optional[bool] = None,
        week_of: Optional[date] = None,
    ):
        self.client = client
        self.timezone = timezone or settings.DEFAULT_TIMEZONE
        self.allow_overlaps = (
            settings.ALLOW_OVERLAPPING_SLOTS if allow_overlaps is None else allow_overlaps
        )
        self.saved = WeeklyAvailabilityModel()
        self.mode = EditorMode.VIEWING
        self.busy = False
        self.notice: Optional[str] = None
        self.time_slots: List[BookableTimeSlot] = []
        self.week_of = week_of or date.today()
        self._draft: Optional[WeeklyAvailabilityModel] = None

    @property
    def editing(self) -> bool:
        return self.mode == EditorMode.EDITING

    @property
    def draft(self) -> WeeklyAvailabilityModel:
        """The scratch schedule; only exists while editing."""
        if self._draft is None:
            raise EditorStateError("Not editing; call begin_edit() first")
        return self._draft

    @property
    def schedule(self) -> WeeklyAvailabilityModel:
        """The schedule currently on display."""
        return self._draft if self._draft is not None else self.saved

    async def load(self) -> WeeklyAvailabilityModel:
        """
        Fetch the stored schedule.

        Never raises on API or format errors: the default schedule is used
        instead and ``notice`` is set.
        """
        if self.editing:
            raise EditorStateError("Save or cancel the current edits before reloading")

        try:
            document = await self.client.get_availability()
            self.saved = WeeklyAvailabilityModel(document)
            self.notice = None
        except (AvailabilityAPIError, ValueError) as exc:
            logger.warning(
                f"Loading availability for practitioner {self.client.practitioner_id} "
                f"failed, using defaults: {exc}"
            )
            self.saved = WeeklyAvailabilityModel()
            self.notice = LOAD_ERROR_NOTICE
        return self.saved

    def begin_edit(self) -> WeeklyAvailabilityModel:
        if self._draft is None:
            self._draft = self.saved.copy()
            self.mode = EditorMode.EDITING
        return self._draft

    def cancel(self) -> None:
        self._draft = None
        self.mode = EditorMode.VIEWING

    async def save(self) -> WeeklyAvailabilityModel:
        """
        Push the draft to the API.

        Validation errors and API failures leave the editor in editing mode
        with the draft intact. Only one save may be in flight at a time.
        The saved state is what was sent; edits made to the draft while the
        request was in flight keep the editor in editing mode.
        """
        if self.busy:
            raise SaveInProgressError()
        draft = self.draft

        draft.validate(allow_overlaps=self.allow_overlaps)
        snapshot = draft.copy()
        document = snapshot.save(self.timezone)

        self.busy = True
        try:
            await self.client.put_availability(document)
        except AvailabilitySaveError as exc:
            logger.error(
                f"Saving availability for practitioner {self.client.practitioner_id} failed: {exc}"
            )
            self.notice = SAVE_ERROR_NOTICE
            raise
        finally:
            self.busy = False

        logger.info(f"Saved availability for practitioner {self.client.practitioner_id}")
        self.saved = snapshot
        self.notice = None
        # Edits made while the request was in flight stay in the draft
        if self._draft is draft and draft == snapshot:
            self.cancel()
        return self.saved

    def navigate_week(self, direction: int) -> date:
        self.week_of = self.week_of + timedelta(weeks=direction)
        return self.week_of

    async def refresh_time_slots(self, week_of: Optional[date] = None) -> List[BookableTimeSlot]:
        """Fetch the bookable slots for the Monday-Sunday week around ``week_of``."""
        if week_of is not None:
            self.week_of = week_of
        start, end = week_bounds(self.week_of)
        try:
            self.time_slots = await self.client.get_time_slots(start, end)
        except AvailabilityAPIError as exc:
            logger.warning(f"Fetching time slots for {start}..{end} failed: {exc}")
            self.time_slots = []
        return self.time_slots

    def summary(self) -> AvailabilitySummary:
        schedule = self.schedule
        return AvailabilitySummary(
            weekly_hours=schedule.compute_weekly_hours(),
            working_days=schedule.count_working_days(),
            available_slots=sum(1 for slot in self.time_slots if slot.is_available),
            total_slots=len(self.time_slots),
        )
