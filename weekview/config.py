import yaml
from loguru import logger

import weekview.settings as settings
from weekview.utils import css_color_to_hex


def load_config(path: str | None = None) -> dict:
    """Load calendar sources and the user directory, normalizing colors."""
    path = path or settings.CONFIG_PATH
    with open(path, 'r', encoding='utf-8') as f:
        logger.debug("Loading configuration from {}", path)
        config = yaml.safe_load(f) or {}
    for cal in config.get("calendars", []):
        if cal.get("color"):
            cal["color"] = css_color_to_hex(cal["color"])
    for user in config.get("users", []):
        if user.get("id") is None:
            raise ValueError(f"User entry without an id in {path}: {user!r}")
        user["id"] = str(user["id"])
        if user.get("color"):
            user["color"] = css_color_to_hex(user["color"])
    config.setdefault("calendars", [])
    config.setdefault("users", [])
    config["selected_assignees"] = [str(u) for u in config.get("selected_assignees") or []]
    return config
