import os
from pathlib import Path

from dateutil import tz
from loguru import logger


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _resolve_zone(name: str):
    """
    Resolve the configured civil timezone name.
    Falls back to UTC (with an error log) when the name is unknown.
    """
    zone = tz.gettz(name)
    if zone is None:
        logger.error("Unknown timezone '{}', falling back to UTC.", name)
        return tz.UTC
    return zone


# Project root
BASE_DIR = Path(__file__).resolve().parent.parent

# File paths
CONFIG_PATH = Path(os.getenv("APP_CONFIG_PATH", str(BASE_DIR / "config.yaml")))
META_FILE   = Path(os.getenv("APP_META_FILE_PATH", str(BASE_DIR / "weekview_meta.yaml")))
OUTPUT_PATH = os.getenv("APP_OUTPUT_PATH", "output/week_layout.yaml")

# Civil time
TIMEZONE = os.getenv("WEEKVIEW_TIMEZONE", "Europe/Bratislava")
TZ_CIVIL = _resolve_zone(TIMEZONE)
TARGET_DATE = os.getenv("TARGET_DATE", "today")
TIME_FORMAT = os.getenv("TIME_FORMAT", "24")
USE_24H     = TIME_FORMAT == "24"

# Grid constants (fixed, not runtime options)
WEEK_START_ISO = 1          # Monday
DAYS_PER_WEEK  = 7
MINUTES_PER_DAY = 1440
SLOT_MINUTES   = 30
SLOTS_PER_DAY  = MINUTES_PER_DAY // SLOT_MINUTES
NOW_TICK_SECONDS = 60
SLOT_CREATE_MINUTES = 60

# Labels
LABELS = os.getenv("WEEKVIEW_LABELS", "sk").lower()

_LABEL_SETS = {
    "sk": {
        "days": ["Po", "Ut", "St", "Št", "Pi", "So", "Ne"],
        "months_short": ["jan", "feb", "mar", "apr", "máj", "jún",
                         "júl", "aug", "sep", "okt", "nov", "dec"],
        "months_long": ["januára", "februára", "marca", "apríla", "mája", "júna",
                        "júla", "augusta", "septembra", "októbra", "novembra", "decembra"],
    },
    "en": {
        "days": ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        "months_short": ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                         "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"],
        "months_long": ["January", "February", "March", "April", "May", "June",
                        "July", "August", "September", "October", "November", "December"],
    },
}
if LABELS not in _LABEL_SETS:
    logger.error("Unknown label set '{}', using 'sk'.", LABELS)
    LABELS = "sk"
DAY_LABELS   = _LABEL_SETS[LABELS]["days"]
MONTHS_SHORT = _LABEL_SETS[LABELS]["months_short"]
MONTHS_LONG  = _LABEL_SETS[LABELS]["months_long"]

# Colors
DEFAULT_COLOR = "#6b7280"
USER_PALETTE = [
    "#3b82f6",  # blue
    "#10b981",  # emerald
    "#f59e0b",  # amber
    "#8b5cf6",  # purple
    "#ec4899",  # pink
    "#06b6d4",  # cyan
    "#6366f1",  # indigo
    "#14b8a6",  # teal
    "#f97316",  # orange
    "#a855f7",  # violet
]

# Behavior
FORCE_REFRESH = _env_flag("APP_FORCE_REFRESH")
DEBUG_LAYERS  = _env_flag("APP_DEBUG_LAYERS")
