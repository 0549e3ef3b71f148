from datetime import datetime, date, time, timedelta
from collections import defaultdict
from dataclasses import replace
from pathlib import Path

import requests
import yaml
from icalendar import Calendar as iCal
from dateutil.rrule import rrulestr
from loguru import logger

from weekview.clock import CivilClock
from weekview.logger import EVENTS
from weekview.models import CalendarTask


def download_calendar(source: str) -> bytes:
    """
    Fetch an ICS calendar from a URL or file path.
    """
    if source.startswith("http"):
        resp = requests.get(source, timeout=30)
        resp.raise_for_status()
        return resp.content
    else:
        with open(source, "rb") as f:
            return f.read()


def parse_calendar(raw: bytes) -> iCal:
    """
    Parse raw ICS bytes into an icalendar.Calendar object.
    """
    return iCal.from_ical(raw)


def _with_zone(dt: datetime, clock: CivilClock) -> datetime:
    # Floating times belong to the civil zone
    if dt.tzinfo is None:
        return clock.to_instant(dt)
    return dt


def load_yaml_tasks(path: str, clock: CivilClock, color: str | None = None) -> list[CalendarTask]:
    """
    Read a YAML task file: a mapping with a `tasks` list (or a bare list).
    """
    with open(path, "r", encoding="utf-8") as f:
        logger.debug("Loading tasks from {}", path)
        data = yaml.safe_load(f) or {}
    records = data.get("tasks", []) if isinstance(data, dict) else data

    tasks = []
    for record in records:
        task = CalendarTask.from_mapping(record)
        task = task.with_interval(_with_zone(task.start, clock), _with_zone(task.end, clock))
        if color and not task.assignee_color:
            task = replace(task, assignee_color=color)
        tasks.append(task)
    return tasks


def _as_instant(value, clock: CivilClock) -> datetime:
    # DATE values mean civil midnight
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    return _with_zone(value, clock)


def build_override_map(components: list, clock: CivilClock) -> dict:
    """
    Map UID to overridden recurrence instants.
    """
    override_map = defaultdict(set)
    for comp in components:
        if comp.get('RECURRENCE-ID'):
            rid = _as_instant(comp.decoded('RECURRENCE-ID'), clock)
            override_map[str(comp.get('UID'))].add(rid)
    return override_map


def _event_bounds(comp, clock: CivilClock) -> tuple[datetime, datetime, bool]:
    start_raw = comp.decoded('dtstart')
    if comp.get('dtend'):
        end_raw = comp.decoded('dtend')
    elif comp.get('duration'):
        end_raw = start_raw + comp.decoded('duration')
    elif isinstance(start_raw, datetime):
        end_raw = start_raw
    else:
        end_raw = start_raw + timedelta(days=1)

    # DATE-valued events are all-day; DTEND is the day after the last one
    if isinstance(start_raw, date) and not isinstance(start_raw, datetime):
        start = clock.to_instant(datetime.combine(start_raw, time.min))
        end = clock.to_instant(datetime.combine(end_raw, time.min))
        return start, end, True
    return _with_zone(start_raw, clock), _with_zone(end_raw, clock), False


def events_from_calendar(
    cal: iCal,
    window_start: datetime,
    window_end: datetime,
    clock: CivilClock,
    color: str | None = None,
) -> list[CalendarTask]:
    """
    Expand VEVENTs (one-offs and RRULE recurrences) into tasks touching the window.
    """
    components = [comp for comp in cal.walk() if comp.name == "VEVENT"]
    override_map = build_override_map(components, clock)

    tasks = []
    for comp in components:
        uid = str(comp.get('UID'))
        title = str(comp.get('SUMMARY', ''))
        status = str(comp.get('STATUS')).lower() if comp.get('STATUS') else None
        start, end, all_day = _event_bounds(comp, clock)
        duration = end - start

        def make(task_id, st, en):
            return CalendarTask(id=task_id, title=title, start=st, end=en, all_day=all_day,
                                assignee_color=color, status=status)

        raw_rr = comp.get('RRULE')
        if raw_rr and not comp.get('RECURRENCE-ID'):
            rule = rrulestr(raw_rr.to_ical().decode(), dtstart=start)
            exdates = set()
            ex_prop = comp.get('EXDATE')
            if ex_prop:
                ex_list = ex_prop if isinstance(ex_prop, list) else [ex_prop]
                for prop in ex_list:
                    for exdt in getattr(prop, 'dts', []):
                        exdates.add(_as_instant(exdt.dt, clock))
            overridden = override_map.get(uid, set())
            for occ in rule.between(window_start - duration, window_end, inc=True):
                if occ in overridden or occ in exdates:
                    continue
                tasks.append(make(f"{uid}@{occ.isoformat()}", occ, occ + duration))
            continue

        if comp.get('RECURRENCE-ID'):
            rid = _as_instant(comp.decoded('RECURRENCE-ID'), clock)
            task_id = f"{uid}@{rid.isoformat()}"
        else:
            task_id = uid
        tasks.append(make(task_id, start, end))

    return tasks


def _in_window(task: CalendarTask, window_start: datetime, window_end: datetime) -> bool:
    if task.start == task.end:
        return window_start <= task.start < window_end
    return task.start < window_end and task.end > window_start


def list_tasks_in_window(
    sources: list[dict],
    window_start: datetime,
    window_end: datetime,
    clock: CivilClock,
) -> list[CalendarTask]:
    """
    Read interface of the task source: every task from every configured
    calendar (YAML task files or ICS feeds) that touches [window_start, window_end).
    """
    names = [entry.get("name", "<unknown>") for entry in sources]
    logger.debug("Loading {} calendars: {}", len(names), names)

    all_tasks = []
    for entry in sources:
        name = entry.get("name")
        color = entry.get("color")
        source = entry.get("source")
        logger.debug("Fetching calendar {} from {}...", name, source)
        if Path(source).suffix.lower() in (".yaml", ".yml"):
            tasks = load_yaml_tasks(source, clock, color=color)
        else:
            cal = parse_calendar(download_calendar(source))
            tasks = events_from_calendar(cal, window_start, window_end, clock, color=color)
        kept = [t for t in tasks if _in_window(t, window_start, window_end)]
        logger.log(EVENTS, "Calendar {}: {} of {} tasks in window.", name, len(kept), len(tasks))
        all_tasks.extend(kept)

    return sorted(all_tasks, key=lambda t: (t.start, t.id))
