from datetime import datetime, timedelta

from loguru import logger

import weekview.settings as settings
from weekview.clock import CivilClock
from weekview.models import DayColumn, NowMarker
from weekview.week import week_key


def now_marker(days: list[DayColumn], clock: CivilClock, now: datetime | None = None) -> NowMarker | None:
    """
    Position of "now" inside the week grid, or None when today is not in `days`.
    """
    civil = clock.to_civil(now if now is not None else clock.now())
    today = civil.date()
    for day_index, day in enumerate(days):
        if day.date == today:
            return NowMarker(day_index=day_index, top=civil.minutes / settings.MINUTES_PER_DAY * 100)
    return None


def scroll_offset(top: float, content_height: float, viewport_height: float) -> float:
    """Scroll position that centres `top` (percent) in the viewport, never negative."""
    return max(0.0, content_height * top / 100 - viewport_height / 2)


class AutoScroll:
    """
    One-shot "scroll to now": fires the first time a week containing today
    is shown, then stays quiet until reset.
    """
    PENDING = "pending"
    DONE = "done"

    def __init__(self):
        self.state = self.PENDING

    def reset(self):
        self.state = self.PENDING

    def should_scroll(self, marker: NowMarker | None) -> bool:
        if marker is None or self.state == self.DONE:
            return False
        self.state = self.DONE
        return True


class NowIndicator:
    """
    Live "now" marker for the displayed week.

    The host calls `activate()` once, then `tick()` whenever `is_due()` says
    the coarse timer has elapsed (once a minute by default). `take_scroll()`
    hands out the auto-scroll request at most once per viewed week.
    """

    def __init__(self, clock: CivilClock, tick_seconds: int = settings.NOW_TICK_SECONDS):
        self.clock = clock
        self.tick_seconds = tick_seconds
        self.marker: NowMarker | None = None
        self.auto_scroll = AutoScroll()
        self._week: str | None = None
        self._last_tick: datetime | None = None
        self._scroll_requested = False

    def set_week(self, days: list[DayColumn]) -> None:
        key = week_key(days)
        if key != self._week:
            logger.debug("Now indicator: week changed {} → {}", self._week, key)
            self._week = key
            self.auto_scroll.reset()

    def reference_changed(self, days: list[DayColumn]) -> None:
        """
        Re-arm the auto-scroll after any navigation, even one that lands on
        the week already shown (e.g. "today" while viewing this week).
        """
        self._week = week_key(days)
        self.auto_scroll.reset()

    def follow(self, navigation) -> None:
        """Reset the auto-scroll whenever `navigation` moves its reference instant."""
        navigation.subscribe(lambda _reference: self.reference_changed(navigation.days()))

    def activate(self, days: list[DayColumn], now: datetime | None = None) -> NowMarker | None:
        self.set_week(days)
        return self.tick(days, now=now)

    def tick(self, days: list[DayColumn], now: datetime | None = None) -> NowMarker | None:
        now = now if now is not None else self.clock.now()
        self.set_week(days)
        self.marker = now_marker(days, self.clock, now=now)
        self._last_tick = now
        if self.auto_scroll.should_scroll(self.marker):
            self._scroll_requested = True
        return self.marker

    def is_due(self, now: datetime | None = None) -> bool:
        if self._last_tick is None:
            return True
        now = now if now is not None else self.clock.now()
        return now - self._last_tick >= timedelta(seconds=self.tick_seconds)

    def take_scroll(self) -> NowMarker | None:
        """Marker to scroll to, if an auto-scroll is pending; clears the request."""
        if not self._scroll_requested:
            return None
        self._scroll_requested = False
        return self.marker
