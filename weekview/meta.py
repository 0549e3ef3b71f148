import yaml
from loguru import logger

import weekview.settings as settings

META_KEYS = ("_last_anchor", "tasks_hash")


def load_meta(meta_file=None) -> dict:
    """
    Load metadata from the meta file. Return {} if missing or invalid.
    """
    meta_file = meta_file or settings.META_FILE
    if meta_file.exists() and meta_file.is_file():
        try:
            data = yaml.safe_load(meta_file.read_text())
        except yaml.YAMLError as e:
            logger.warning("Failed to parse meta file: {}, using empty metadata.", e)
            return {}
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if k in META_KEYS}
    return {}


def save_meta(meta: dict, meta_file=None) -> None:
    """
    Save metadata to the meta file, only writing expected keys.
    """
    meta_file = meta_file or settings.META_FILE
    to_write = {k: meta[k] for k in META_KEYS if k in meta}
    try:
        meta_file.parent.mkdir(parents=True, exist_ok=True)
        meta_file.write_text(yaml.safe_dump(to_write))
    except OSError as e:
        logger.warning("Failed to write meta file: {}", e)
