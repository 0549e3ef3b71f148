import sys
import os
from datetime import datetime, time, timedelta

import yaml
from loguru import logger

import weekview.settings as settings
from weekview.clock import CivilClock
from weekview.config import load_config
from weekview.meta import load_meta, save_meta
from weekview.task_loader import list_tasks_in_window
from weekview.event_processing import compute_tasks_hash
from weekview.layout import build_week_layout
from weekview.utils import fmt_time, parse_reference_date, task_color
from weekview.week import week_start, week_title
from weekview.logger import configure_logging


def main():
    # 0) Set up logs
    configure_logging()

    # 1) Civil clock for the configured zone
    clock = CivilClock()
    logger.debug("Timezone: {}", settings.TIMEZONE)

    # 2) Resolve the reference instant
    now = clock.now()
    ref_date = parse_reference_date(settings.TARGET_DATE, clock.civil_date(now))
    reference = clock.to_instant(datetime.combine(ref_date, time(12, 0)))

    # 3) Visible window
    monday = week_start(reference, clock)
    window_start = clock.start_of_day(monday)
    window_end = clock.start_of_day(monday + timedelta(days=settings.DAYS_PER_WEEK))

    # 4) Load config and tasks
    config = load_config()
    meta = load_meta()
    tasks = list_tasks_in_window(config["calendars"], window_start, window_end, clock)

    # 5) Compute anchor & hash for change detection
    anchor = f"{monday.isoformat()}:{settings.TIMEZONE}"
    new_hash = compute_tasks_hash(tasks)
    last_anchor = meta.get("_last_anchor")
    prev_hash = meta.get("tasks_hash")

    if not settings.FORCE_REFRESH and last_anchor == anchor and prev_hash == new_hash:
        logger.info("No changes for {}, skipping generation.", anchor)
        sys.exit(0)

    if settings.FORCE_REFRESH:
        logger.info("FORCE_REFRESH set, refreshing...")
    elif last_anchor != anchor:
        logger.info("Week changed: {} → {}, refreshing...", last_anchor, anchor)
    else:
        logger.info("Tasks changed, refreshing...")

    # 6) Layout
    layout = build_week_layout(
        tasks,
        reference,
        clock=clock,
        selected_assignee_ids=config["selected_assignees"],
        now=now,
    )
    out = layout.to_dict()
    out["title"] = week_title(layout.days)
    out["timezone"] = settings.TIMEZONE
    out["colors"] = {
        t.id: task_color(t, config["users"])
        for t in tasks
    }
    out["time_labels"] = {
        t.id: f"{fmt_time(clock.local(t.start))} - {fmt_time(clock.local(t.end))}"
        for t in tasks if not t.all_day
    }

    # 7) Write output
    out_path = settings.OUTPUT_PATH
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(out, f, allow_unicode=True, sort_keys=False)
    logger.info("Wrote layout to {}", out_path)

    # 8) Persist metadata
    save_meta({"_last_anchor": anchor, "tasks_hash": new_hash})
    logger.info("✅ Completed layout for {}", anchor)


if __name__ == '__main__':
    main()
