from datetime import datetime

from loguru import logger

import weekview.settings as settings
from weekview.clock import CivilClock, default_clock
from weekview.event_processing import (
    assign_columns,
    filter_by_assignees,
    group_events_by_day,
    clip_to_day,
    normalize_task,
    segments_for_week,
    split_all_day_events,
)
from weekview.models import AllDayEntry, ClippedSegment, EventLayout, WeekLayout
from weekview.now import now_marker
from weekview.week import compute_week


def minutes_to_top(minutes: float) -> float:
    """
    Convert minutes from civil midnight to a vertical offset in percent of the day column.
    """
    return minutes / settings.MINUTES_PER_DAY * 100


def calculate_event_layout(segments: list[ClippedSegment]) -> list[EventLayout]:
    """
    Percentage geometry for one day's clipped segments, in packing order.
    """
    if not segments:
        return []

    layouts = []
    for item in assign_columns(segments):
        seg = item["segment"]
        col = item["column"]
        total = item["total_columns"]
        layouts.append(EventLayout(
            task=seg.task,
            column=col,
            total_columns=total,
            top=minutes_to_top(seg.start),
            height=minutes_to_top(seg.end - seg.start),
            left=col / total * 100,
            width=1 / total * 100,
            start=seg.start,
            end=seg.end,
            kind=seg.kind,
        ))
    return layouts


def all_day_layout(tasks, days, clock: CivilClock) -> list[AllDayEntry]:
    """
    One entry per (day, all-day task) pair, ordered by day then input order.
    The segment kind tells a renderer whether the band starts, continues or ends there.
    """
    grouped = group_events_by_day(tasks, days, clock)
    entries = []
    for day_index in sorted(grouped):
        for task in grouped[day_index]:
            entries.append(AllDayEntry(day_index=day_index, segment=clip_to_day(task, days[day_index], clock)))
    return entries


def build_week_layout(
    tasks,
    reference: datetime,
    clock: CivilClock | None = None,
    selected_assignee_ids: list[str] | None = None,
    now: datetime | None = None,
) -> WeekLayout:
    """
    Full layout pass for the week containing `reference`:
      • assignee filter and interval normalization
      • all-day / timed split
      • per-day clipping and overlap packing
      • now marker
    Pure: the same inputs always give the same layout.
    """
    clock = clock or default_clock()
    now = now if now is not None else clock.now()

    days = compute_week(reference, clock, now=now)

    warnings = []
    normalized = []
    for task in filter_by_assignees(tasks, selected_assignee_ids):
        task, warning = normalize_task(task)
        if warning:
            warnings.append(warning)
        normalized.append(task)

    all_day, timed = split_all_day_events(normalized)

    per_day = segments_for_week(timed, days, clock)
    timed_layout = {
        day_index: calculate_event_layout(per_day.get(day_index, []))
        for day_index in range(len(days))
    }

    layout = WeekLayout(
        days=days,
        all_day=all_day_layout(all_day, days, clock),
        timed=timed_layout,
        now_marker=now_marker(days, clock, now=now),
        warnings=warnings,
    )
    logger.debug(
        "Week {}: {} all-day entries, {} timed segments.",
        days[0].date.isoformat(),
        len(layout.all_day),
        sum(len(v) for v in timed_layout.values()),
    )
    return layout
