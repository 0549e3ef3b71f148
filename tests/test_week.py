from datetime import date, datetime, timedelta, timezone

import pytest

from weekview.week import compute_week, week_start, week_key, week_title, format_date_label


@pytest.mark.parametrize("reference_day", range(12, 19))
def test_week_is_monday_to_sunday(clock, wall, reference_day):
    days = compute_week(wall(2026, 10, reference_day, 15), clock, now=wall(2026, 1, 1))
    assert days[0].date == date(2026, 10, 12)
    assert days[0].date.isoweekday() == 1
    assert days[6].date.isoweekday() == 7
    assert [d.date for d in days] == [date(2026, 10, 12) + timedelta(days=i) for i in range(7)]


def test_sunday_belongs_to_previous_monday(clock, wall):
    assert week_start(wall(2026, 10, 25, 23, 59), clock) == date(2026, 10, 19)


def test_week_start_uses_civil_date_not_utc(clock):
    # 22:30 UTC on Sunday is already Monday 00:30 in Bratislava
    reference = datetime(2026, 10, 18, 22, 30, tzinfo=timezone.utc)
    assert week_start(reference, clock) == date(2026, 10, 19)


@pytest.mark.parametrize("reference", [
    datetime(2026, 10, 25, 1, 30, tzinfo=timezone.utc),   # fall-back day
    datetime(2026, 3, 29, 1, 30, tzinfo=timezone.utc),    # spring-forward day
])
def test_dst_week_has_seven_consecutive_dates(clock, reference):
    days = compute_week(reference, clock, now=reference)
    dates = [d.date for d in days]
    assert len(set(dates)) == 7
    assert all((b - a).days == 1 for a, b in zip(dates, dates[1:]))
    assert dates[-1] == clock.civil_date(reference)


def test_is_today_follows_now_not_reference(clock, wall):
    now = wall(2026, 10, 21, 12)
    this_week = compute_week(wall(2026, 10, 19, 8), clock, now=now)
    assert [d.is_today for d in this_week] == [False, False, True, False, False, False, False]

    next_week = compute_week(wall(2026, 10, 28, 8), clock, now=now)
    assert not any(d.is_today for d in next_week)


def test_is_today_stable_within_week(clock, wall):
    now = wall(2026, 10, 21, 23, 59)
    a = compute_week(wall(2026, 10, 19, 0, 1), clock, now=now)
    b = compute_week(wall(2026, 10, 25, 23, 0), clock, now=now)
    assert a == b


def test_is_today_stable_across_host_timezones(clock, wall, host_tz):
    now = wall(2026, 10, 21, 0, 30)
    reference = wall(2026, 10, 20, 9)
    baseline = compute_week(reference, clock, now=now)
    for host in ("America/Los_Angeles", "Asia/Tokyo"):
        host_tz(host)
        assert compute_week(reference, clock, now=now) == baseline


def test_default_now_uses_clock(clock, frozen_time):
    days = compute_week(datetime(2026, 10, 20, tzinfo=timezone.utc), clock)
    assert days[2].is_today


def test_labels(clock, wall):
    days = compute_week(wall(2026, 10, 19), clock, now=wall(2026, 10, 19))
    assert [d.day_label for d in days] == ["Po", "Ut", "St", "Št", "Pi", "So", "Ne"]
    assert days[0].date_label == "19. okt"
    assert format_date_label(date(2026, 5, 3)) == "3. máj"
    assert week_key(days) == "2026-10-19"
    assert week_title(days) == "19. októbra - 25. októbra 2026"
