from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from loguru import logger

import weekview.settings as settings
from weekview.clock import CivilClock
from weekview.models import CalendarTask, DayColumn
from weekview.week import compute_week


@dataclass(frozen=True)
class KeyTarget:
    """Where keyboard focus was when a key arrived."""
    inside_calendar: bool
    editable: bool = False


class NavigationController:
    """
    Week stepping state for the calendar surface.

    Holds the reference instant that seeds the week window; listeners are
    told whenever it changes (e.g. to reset the auto-scroll).
    """

    KEY_ACTIONS = {
        "ArrowLeft": "previous_week",
        "ArrowRight": "next_week",
        "Home": "go_to_today",
    }

    def __init__(self, clock: CivilClock, reference: datetime | None = None):
        self.clock = clock
        self.reference = reference if reference is not None else clock.now()
        self._listeners: list[Callable[[datetime], None]] = []

    def subscribe(self, listener: Callable[[datetime], None]) -> None:
        self._listeners.append(listener)

    def _set_reference(self, reference: datetime) -> None:
        self.reference = reference
        for listener in self._listeners:
            listener(reference)

    def days(self, now: datetime | None = None) -> list[DayColumn]:
        return compute_week(self.reference, self.clock, now=now)

    def previous_week(self) -> datetime:
        self._set_reference(self.clock.add_civil_days(self.reference, -settings.DAYS_PER_WEEK))
        return self.reference

    def next_week(self) -> datetime:
        self._set_reference(self.clock.add_civil_days(self.reference, settings.DAYS_PER_WEEK))
        return self.reference

    def go_to_today(self) -> datetime:
        self._set_reference(self.clock.now())
        return self.reference

    def handle_key(self, key: str, target: KeyTarget) -> str | None:
        """
        Apply a keyboard binding. Keys are ignored unless focus is inside the
        calendar and outside any text-editing control.
        Returns the action taken, or None.
        """
        if target.editable or not target.inside_calendar:
            return None
        if key == "Escape":
            return "blur"
        action = self.KEY_ACTIONS.get(key)
        if action is None:
            return None
        logger.debug("Key {} → {}", key, action)
        getattr(self, action)()
        return action

    def slot_interval(self, day_index: int, hour: int, minute: int) -> tuple[datetime, datetime]:
        """
        (start, end) instants for a grid cell; the proposed task lasts one hour.
        """
        day = self.days()[day_index]
        wall = datetime.combine(day.date, datetime.min.time()) + timedelta(hours=hour, minutes=minute)
        start = self.clock.to_instant(wall)
        end = self.clock.to_instant(wall + timedelta(minutes=settings.SLOT_CREATE_MINUTES))
        return start, end

    def activate_slot(self, day_index: int, hour: int, minute: int,
                      on_slot_activated: Callable[[datetime, datetime], None] | None = None):
        if on_slot_activated is None:
            return None
        start, end = self.slot_interval(day_index, hour, minute)
        on_slot_activated(start, end)
        return start, end

    @staticmethod
    def activate_task(task: CalendarTask, on_task_activated: Callable[[CalendarTask], None] | None = None) -> None:
        if on_task_activated is not None:
            on_task_activated(task)
