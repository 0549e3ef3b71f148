from datetime import datetime, date, timedelta

import weekview.settings as settings
from weekview.clock import CivilClock
from weekview.models import DayColumn


def format_date_label(d: date) -> str:
    """Short date label, e.g. "19. okt" (sk) or "Oct 19" (en)."""
    month = settings.MONTHS_SHORT[d.month - 1]
    if settings.LABELS == "en":
        return f"{month} {d.day}"
    return f"{d.day}. {month}"


def week_start(reference: datetime, clock: CivilClock) -> date:
    """
    Civil Monday of the week containing `reference`.
    Sunday counts as weekday 7, so it belongs to the week that started six days earlier.
    """
    civil = clock.civil_date(reference)
    return civil - timedelta(days=civil.isoweekday() - settings.WEEK_START_ISO)


def compute_week(reference: datetime, clock: CivilClock, now: datetime | None = None) -> list[DayColumn]:
    """
    The seven DayColumns of the Monday-anchored week containing `reference`.
    `is_today` is compared against the civil date of now, not the reference.
    """
    monday = week_start(reference, clock)
    today = clock.civil_date(now if now is not None else clock.now())
    days = []
    for i in range(settings.DAYS_PER_WEEK):
        d = monday + timedelta(days=i)
        days.append(DayColumn(
            date=d,
            day_label=settings.DAY_LABELS[i],
            date_label=format_date_label(d),
            is_today=(d == today),
        ))
    return days


def week_key(days: list[DayColumn]) -> str:
    return days[0].date.isoformat()


def week_title(days: list[DayColumn]) -> str:
    first, last = days[0].date, days[-1].date
    if settings.LABELS == "en":
        return (f"{settings.MONTHS_LONG[first.month - 1]} {first.day} - "
                f"{settings.MONTHS_LONG[last.month - 1]} {last.day}, {last.year}")
    return (f"{first.day}. {settings.MONTHS_LONG[first.month - 1]} - "
            f"{last.day}. {settings.MONTHS_LONG[last.month - 1]} {last.year}")
