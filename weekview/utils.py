from datetime import datetime, timedelta, date
import re
from loguru import logger
import webcolors
from dateutil.relativedelta import relativedelta

from weekview.settings import USE_24H, DEFAULT_COLOR, USER_PALETTE


def css_color_to_hex(name_or_hex: str) -> str:
    """
    Normalize a user or calendar color from the config to a 6-digit hex code.

    Hex codes pass through; `gray(N%)` and the sixteen-step `grayN` shorthand
    (0 black .. 15 white) become greys; anything else is looked up as a CSS
    name with webcolors. Unknown names are logged and returned as given.
    """

    if name_or_hex.startswith("#"):
        return name_or_hex

    lower = name_or_hex.lower().strip()

    m_pct = re.fullmatch(r'gray\(\s*([0-9]+(?:\.[0-9]+)?)%\s*\)', lower)
    if m_pct:
        pct = float(m_pct.group(1))
        level = round(255 * pct / 100)
        return f"#{level:02X}{level:02X}{level:02X}"

    steps = {"black": 0, "white": 15}
    m_step = re.fullmatch(r'gray([0-9]|1[0-5])', lower)
    if m_step or lower in steps:
        level = 17 * (int(m_step.group(1)) if m_step else steps[lower])
        return f"#{level:02X}{level:02X}{level:02X}"

    try:
        return webcolors.name_to_hex(lower)
    except ValueError:
        logger.error("Unknown CSS color '{}', passing through.", name_or_hex)
        return name_or_hex


def _to_int32(n: int) -> int:
    n &= 0xFFFFFFFF
    return n - 0x100000000 if n >= 0x80000000 else n


def string_hash(value: str) -> int:
    """
    31-multiplier string hash with 32-bit wraparound on the shift.
    """
    h = 0
    for ch in value:
        h = ord(ch) + (_to_int32(h << 5) - h)
    return h


def user_color(user_id: str | None, users: list[dict] | None = None) -> str:
    """
    Display color for an assignee: the user's own color if the directory has
    one, else a palette color picked by hashing the id.
    """
    if not user_id:
        return DEFAULT_COLOR
    for user in users or []:
        if user.get("id") == user_id and user.get("color"):
            return css_color_to_hex(user["color"])
    return USER_PALETTE[abs(string_hash(user_id)) % len(USER_PALETTE)]


def fmt_time(dt: datetime, use_24h: bool | None = None) -> str:
    """
    Clock label for a civil wall time, HH:MM or h:MM AM/PM (TIME_FORMAT).
    """
    if use_24h is None:
        use_24h = USE_24H
    if use_24h:
        return dt.strftime("%H:%M")
    else:
        return dt.strftime("%-I:%M %p")


def parse_reference_date(s: str, today: date) -> date:
    """
    Resolve a human-friendly reference expression into a civil date.

    Accepts "today", "this week", "next week", "last week"/"previous week",
    "+N weeks"/"-N days" offsets and ISO dates (YYYY-MM-DD).
    """
    s = s.strip().strip('"').strip("'").lower()

    if s in ("", "day", "today", "week", "this week", "now"):
        return today
    if s == "next week":
        return today + timedelta(weeks=1)
    if s in ("last week", "previous week"):
        return today - timedelta(weeks=1)

    m = re.fullmatch(r'(?P<sign>[+-])\s*(?P<num>\d+)\s*(?P<unit>days?|weeks?|months?)', s)
    if m:
        num = int(m.group("num")) * (1 if m.group("sign") == "+" else -1)
        unit = m.group("unit")
        if unit.startswith("day"):
            return today + timedelta(days=num)
        if unit.startswith("week"):
            return today + timedelta(weeks=num)
        return today + relativedelta(months=num)

    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        logger.error("Cannot parse reference date from '{}'.", s)
        raise ValueError(f"Invalid reference date: '{s}'")


def task_color(task, users: list[dict] | None = None) -> str:
    """
    Color for a task: the directory color of its assignee, then the color the
    task source supplied, then the hashed placeholder.
    """
    for user in users or []:
        if task.assignee_id and user.get("id") == task.assignee_id and user.get("color"):
            return css_color_to_hex(user["color"])
    if task.assignee_color:
        return css_color_to_hex(task.assignee_color)
    return user_color(task.assignee_id, users)
