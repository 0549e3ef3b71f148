from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as dtparser

from weekview.settings import SLOTS_PER_DAY, SLOT_MINUTES


@dataclass(frozen=True)
class CalendarTask:
    """
    A task as supplied by the task source. The engine never mutates it.
    """
    id: str
    title: str
    start: datetime
    end: datetime
    all_day: bool = False
    assignee_id: Optional[str] = None
    assignee_name: Optional[str] = None
    assignee_color: Optional[str] = None
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None

    def with_interval(self, start: datetime, end: datetime) -> "CalendarTask":
        return replace(self, start=start, end=end)

    @classmethod
    def from_mapping(cls, data: dict) -> "CalendarTask":
        """
        Build a task from a plain mapping (camelCase or snake_case keys).
        String instants are parsed with dateutil; a missing allDay is False.
        """
        def pick(*keys, default=None):
            for k in keys:
                if k in data and data[k] is not None:
                    return data[k]
            return default

        def parse_instant(value, key):
            if isinstance(value, datetime):
                return value
            if isinstance(value, date):
                return datetime.combine(value, datetime.min.time())
            if not isinstance(value, str):
                raise ValueError(f"Task {data.get('id')!r}: missing or invalid '{key}'")
            try:
                return dtparser.isoparse(value)
            except ValueError as e:
                raise ValueError(f"Task {data.get('id')!r}: cannot parse '{key}': {value!r}") from e

        if "id" not in data:
            raise ValueError(f"Task without id: {data!r}")

        project = data.get("project") or {}
        start = parse_instant(pick("start", "start_date"), "start")
        end = parse_instant(pick("end", "end_date", default=start), "end")
        return cls(
            id=str(data["id"]),
            title=str(pick("title", default="")),
            start=start,
            end=end,
            all_day=bool(pick("allDay", "all_day", default=False)),
            assignee_id=pick("assigneeId", "assignee_id"),
            assignee_name=pick("assigneeName", "assignee_name"),
            assignee_color=pick("assigneeColor", "assignee_color"),
            project_id=project.get("id") or pick("projectId", "project_id"),
            project_name=project.get("name") or pick("projectName", "project_name"),
            status=pick("status"),
            priority=pick("priority"),
        )


@dataclass(frozen=True)
class DayColumn:
    date: date
    day_label: str
    date_label: str
    is_today: bool


@dataclass(frozen=True)
class ClippedSegment:
    # start/end are civil minutes from midnight, 0 <= start <= end <= 1440
    task: CalendarTask
    start: float
    end: float
    kind: str = "whole"

    def overlaps(self, other: "ClippedSegment") -> bool:
        return not (self.end <= other.start or self.start >= other.end)


@dataclass(frozen=True)
class EventLayout:
    task: CalendarTask
    column: int
    total_columns: int
    top: float
    height: float
    left: float
    width: float
    start: float
    end: float
    kind: str = "whole"


@dataclass(frozen=True)
class TimeSlot:
    hour: int
    minute: int
    label: str


TIME_SLOTS = [
    TimeSlot(
        hour=(i * SLOT_MINUTES) // 60,
        minute=(i * SLOT_MINUTES) % 60,
        label=f"{(i * SLOT_MINUTES) // 60:02}:{(i * SLOT_MINUTES) % 60:02}",
    )
    for i in range(SLOTS_PER_DAY)
]


@dataclass(frozen=True)
class NowMarker:
    day_index: int
    top: float


@dataclass(frozen=True)
class AllDayEntry:
    day_index: int
    segment: ClippedSegment

    @property
    def task(self) -> CalendarTask:
        return self.segment.task


def _round(value: float) -> float:
    return round(value, 6)


@dataclass(frozen=True)
class WeekLayout:
    days: list
    all_day: list
    timed: dict
    now_marker: Optional[NowMarker] = None
    warnings: list = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """
        Plain, deterministic representation (ISO strings, rounded floats).
        """
        return {
            "days": [
                {
                    "date": d.date.isoformat(),
                    "day_label": d.day_label,
                    "date_label": d.date_label,
                    "is_today": d.is_today,
                }
                for d in self.days
            ],
            "all_day": [
                {
                    "day": e.day_index,
                    "task_id": e.task.id,
                    "title": e.task.title,
                    "kind": e.segment.kind,
                }
                for e in self.all_day
            ],
            "timed": {
                day_index: [
                    {
                        "task_id": ev.task.id,
                        "title": ev.task.title,
                        "column": ev.column,
                        "total_columns": ev.total_columns,
                        "top": _round(ev.top),
                        "height": _round(ev.height),
                        "left": _round(ev.left),
                        "width": _round(ev.width),
                        "kind": ev.kind,
                    }
                    for ev in events
                ]
                for day_index, events in sorted(self.timed.items())
            },
            "now_marker": (
                {"day": self.now_marker.day_index, "top": _round(self.now_marker.top)}
                if self.now_marker else None
            ),
            "warnings": list(self.warnings),
        }
