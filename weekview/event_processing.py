from datetime import datetime, date
from collections import defaultdict
import hashlib

from loguru import logger

import weekview.settings as settings
from weekview.clock import CivilClock
from weekview.logger import LAYOUT, EVENTS
from weekview.models import CalendarTask, ClippedSegment, DayColumn


def _day_date(day: DayColumn | date) -> date:
    return day.date if isinstance(day, DayColumn) else day


def normalize_task(task: CalendarTask) -> tuple[CalendarTask, str | None]:
    """
    Return the task with end >= start. An inverted interval becomes zero
    duration at its start and a data-quality warning is returned alongside.
    """
    if task.end < task.start:
        warning = f"Task {task.id} ends before it starts ({task.start.isoformat()} > {task.end.isoformat()}); treated as zero duration."
        logger.warning("{}", warning)
        return task.with_interval(task.start, task.start), warning
    return task, None


def filter_by_assignees(tasks: list[CalendarTask], selected_ids: list[str] | None) -> list[CalendarTask]:
    """
    Keep tasks assigned to one of `selected_ids`.
    An empty or missing selection keeps everything; unassigned tasks only survive an empty selection.
    """
    if not selected_ids:
        return list(tasks)
    wanted = set(selected_ids)
    kept = [t for t in tasks if t.assignee_id and t.assignee_id in wanted]
    logger.log(EVENTS, "Assignee filter kept {} of {} tasks.", len(kept), len(tasks))
    return kept


def split_all_day_events(tasks: list[CalendarTask]) -> tuple[list, list]:
    all_day, timed = [], []
    for task in tasks:
        if task.all_day:
            all_day.append(task)
        else:
            timed.append(task)
    return all_day, timed


def civil_interval(task: CalendarTask, clock: CivilClock) -> tuple[datetime, datetime]:
    """
    Task interval as naive civil wall datetimes.
    A fall-back hour can map a short task's end before its start; the end is pinned to the start then.
    """
    start = clock.local(task.start)
    end = clock.local(task.end)
    return start, max(start, end)


def intersects_day(task: CalendarTask, day: DayColumn | date, clock: CivilClock) -> bool:
    """
    Half-open intersection of the task with the civil day [00:00, 24:00).
    A zero-duration task only belongs to the day containing its instant.
    """
    start, end = civil_interval(task, clock)
    day_start, day_end = clock.day_bounds(_day_date(day))
    if start == end:
        return day_start <= start < day_end
    return start < day_end and end > day_start


def group_events_by_day(tasks: list[CalendarTask], days: list, clock: CivilClock) -> dict[int, list[CalendarTask]]:
    grouped = defaultdict(list)
    for task in tasks:
        for day_index, day in enumerate(days):
            if intersects_day(task, day, clock):
                grouped[day_index].append(task)
    return dict(grouped)


def clip_to_day(task: CalendarTask, day: DayColumn | date, clock: CivilClock) -> ClippedSegment:
    """
    Clip the task to one civil day; bounds are minutes from midnight in [0, 1440].
    """
    start, end = civil_interval(task, clock)
    day_start, day_end = clock.day_bounds(_day_date(day))

    clipped_start = max(start, day_start)
    clipped_end = min(end, day_end)

    span = settings.MINUTES_PER_DAY
    start_min = min(max((clipped_start - day_start).total_seconds() / 60, 0), span)
    end_min = min(max((clipped_end - day_start).total_seconds() / 60, start_min), span)

    starts_before = start < day_start
    ends_after = end > day_end
    if starts_before and ends_after:
        kind = "continuation"
    elif starts_before:
        kind = "end"
    elif ends_after:
        kind = "start"
    else:
        kind = "whole"

    return ClippedSegment(task=task, start=start_min, end=end_min, kind=kind)


def segments_for_week(tasks: list[CalendarTask], days: list, clock: CivilClock) -> dict[int, list[ClippedSegment]]:
    """
    Clipped segments per day index, in task input order.
    """
    grouped = group_events_by_day(tasks, days, clock)
    return {
        day_index: [clip_to_day(task, days[day_index], clock) for task in day_tasks]
        for day_index, day_tasks in grouped.items()
    }


def assign_columns(segments: list[ClippedSegment]) -> list[dict]:
    """
    Greedy first-fit packing of one day's segments into columns.

    Segments are stably sorted by start; each lands in the first column with
    no time overlap. `total_columns` is one more than the highest column among
    the segments that directly overlap it (its own column included), so a
    chain of overlaps can leave neighbours with different widths.
    """
    ordered = sorted(segments, key=lambda s: s.start)

    columns: list[list[ClippedSegment]] = []
    assignments = []
    for seg in ordered:
        for ci, column in enumerate(columns):
            if all(seg.end <= other.start or seg.start >= other.end for other in column):
                column.append(seg)
                assignments.append(ci)
                break
        else:
            columns.append([seg])
            assignments.append(len(columns) - 1)

    result = []
    for i, seg in enumerate(ordered):
        max_col = assignments[i]
        for j, other in enumerate(ordered):
            if i != j and seg.overlaps(other) and assignments[j] > max_col:
                max_col = assignments[j]
        result.append({
            "segment": seg,
            "column": assignments[i],
            "total_columns": max_col + 1,
        })

    if settings.DEBUG_LAYERS:
        logger.log(LAYOUT, "Packed {} segments into {} columns:", len(ordered), len(columns))
        for item in result:
            seg = item["segment"]
            logger.log(LAYOUT, "  • Column {}/{}: {} [{:.0f}→{:.0f}]",
                       item["column"], item["total_columns"], seg.task.title, seg.start, seg.end)

    return result


def compute_tasks_hash(tasks: list[CalendarTask]) -> str:
    """
    Order-independent fingerprint of a task set, for change detection.
    """
    items = []
    for t in tasks:
        data = "|".join(str(v) for v in (
            t.id, t.title, t.start.isoformat(), t.end.isoformat(), t.all_day,
            t.assignee_id, t.assignee_color, t.project_id, t.status, t.priority,
        )).encode()
        items.append((t.id, data))
    items.sort(key=lambda x: (x[0], hashlib.sha256(x[1]).hexdigest()))
    h = hashlib.sha256()
    for task_id, data in items:
        h.update(task_id.encode())
        h.update(data)
    return h.hexdigest()
