from datetime import date, datetime, timezone

import pytest

from weekview.task_loader import list_tasks_in_window, load_yaml_tasks

ICS = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//weekview//tests//EN
BEGIN:VEVENT
UID:standup
SUMMARY:Standup
DTSTART:20261020T070000Z
DTEND:20261020T073000Z
END:VEVENT
BEGIN:VEVENT
UID:offsite
SUMMARY:Offsite
DTSTART;VALUE=DATE:20261022
DTEND;VALUE=DATE:20261024
END:VEVENT
BEGIN:VEVENT
UID:review
SUMMARY:Review
DTSTART:20261005T130000Z
DTEND:20261005T140000Z
RRULE:FREQ=WEEKLY;COUNT=10
EXDATE:20261019T130000Z
END:VEVENT
BEGIN:VEVENT
UID:daily
SUMMARY:Check-in
DTSTART:20261015T080000Z
DTEND:20261015T081500Z
RRULE:FREQ=DAILY;COUNT=30
END:VEVENT
BEGIN:VEVENT
UID:old
SUMMARY:Old
DTSTART:20260101T100000Z
DTEND:20260101T110000Z
END:VEVENT
END:VCALENDAR
"""

YAML_TASKS = """
tasks:
  - id: t1
    title: Plan sprint
    start: "2026-10-20T09:00:00"
    end: "2026-10-20T10:00:00"
    assigneeId: u1
    project:
      id: p1
      name: Website
  - id: t2
    title: Someday
    start: "2026-11-20T09:00:00"
    end: "2026-11-20T10:00:00"
  - id: t3
    title: Holiday
    start: 2026-10-23
    end: 2026-10-24
    allDay: true
"""


@pytest.fixture
def window(wall):
    return wall(2026, 10, 19), wall(2026, 10, 26)


def test_yaml_naive_times_are_civil(tmp_path, clock, wall):
    path = tmp_path / "tasks.yaml"
    path.write_text(YAML_TASKS, encoding="utf-8")
    tasks = load_yaml_tasks(str(path), clock, color="#112233")
    t1 = tasks[0]
    assert t1.start == wall(2026, 10, 20, 9)
    assert t1.start.astimezone(timezone.utc) == datetime(2026, 10, 20, 7, tzinfo=timezone.utc)
    assert t1.project_name == "Website"
    assert t1.assignee_color == "#112233"
    assert tasks[2].all_day is True
    assert clock.civil_date(tasks[2].start) == date(2026, 10, 23)


def test_yaml_source_is_filtered_to_window(tmp_path, clock, window):
    path = tmp_path / "tasks.yml"
    path.write_text(YAML_TASKS, encoding="utf-8")
    tasks = list_tasks_in_window([{"name": "team", "source": str(path)}], *window, clock)
    assert [t.id for t in tasks] == ["t1", "t3"]


def test_yaml_task_without_start_is_rejected(tmp_path, clock):
    path = tmp_path / "bad.yaml"
    path.write_text("tasks:\n  - id: x\n    title: nothing\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_yaml_tasks(str(path), clock)


def test_ics_source_expands_recurrences(tmp_path, clock, window):
    path = tmp_path / "team.ics"
    path.write_text(ICS, encoding="utf-8")
    tasks = list_tasks_in_window([{"name": "team", "source": str(path), "color": "#3b82f6"}], *window, clock)

    titles = [t.title for t in tasks]
    assert titles.count("Standup") == 1
    assert titles.count("Check-in") == 7
    assert "Review" not in titles
    assert "Old" not in titles

    offsite = next(t for t in tasks if t.title == "Offsite")
    assert offsite.all_day
    assert clock.civil_date(offsite.start) == date(2026, 10, 22)
    assert clock.civil_date(offsite.end) == date(2026, 10, 24)

    assert all(t.assignee_color == "#3b82f6" for t in tasks)
    assert [t.start for t in tasks] == sorted(t.start for t in tasks)


def test_missing_source_raises(tmp_path, clock, window):
    with pytest.raises(FileNotFoundError):
        list_tasks_in_window([{"name": "gone", "source": str(tmp_path / "gone.ics")}], *window, clock)


MOVED_ICS = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//weekview//tests//EN
BEGIN:VEVENT
UID:sync
SUMMARY:Sync
DTSTART:20261019T090000
DTEND:20261019T093000
RRULE:FREQ=DAILY;COUNT=7
END:VEVENT
BEGIN:VEVENT
UID:sync
SUMMARY:Sync moved
RECURRENCE-ID:20261020T090000
DTSTART:20261020T140000
DTEND:20261020T143000
END:VEVENT
BEGIN:VEVENT
UID:holiday
SUMMARY:Holiday
DTSTART;VALUE=DATE:20261019
DTEND;VALUE=DATE:20261020
RRULE:FREQ=DAILY;COUNT=7
END:VEVENT
BEGIN:VEVENT
UID:holiday
SUMMARY:Holiday moved
RECURRENCE-ID;VALUE=DATE:20261021
DTSTART;VALUE=DATE:20261024
DTEND;VALUE=DATE:20261025
END:VEVENT
END:VCALENDAR
"""


def test_floating_override_replaces_its_occurrence(tmp_path, clock, wall, window):
    path = tmp_path / "moved.ics"
    path.write_text(MOVED_ICS, encoding="utf-8")
    tasks = list_tasks_in_window([{"name": "team", "source": str(path)}], *window, clock)

    syncs = [t for t in tasks if t.title.startswith("Sync")]
    assert len(syncs) == 7
    tuesday = [
        (t.title, clock.to_civil(t.start).hour)
        for t in syncs if clock.civil_date(t.start) == date(2026, 10, 20)
    ]
    assert tuesday == [("Sync moved", 14)]
    moved = next(t for t in syncs if t.title == "Sync moved")
    assert moved.id == f"sync@{wall(2026, 10, 20, 9).isoformat()}"


def test_date_override_replaces_its_occurrence(tmp_path, clock, window):
    path = tmp_path / "moved.ics"
    path.write_text(MOVED_ICS, encoding="utf-8")
    tasks = list_tasks_in_window([{"name": "team", "source": str(path)}], *window, clock)

    holidays = [t for t in tasks if t.title.startswith("Holiday")]
    assert len(holidays) == 7
    wednesday = [t for t in holidays if clock.civil_date(t.start) == date(2026, 10, 21)]
    assert wednesday == []
    saturday = sorted(t.title for t in holidays if clock.civil_date(t.start) == date(2026, 10, 24))
    assert saturday == ["Holiday", "Holiday moved"]