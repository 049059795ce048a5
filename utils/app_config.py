"""Pre-DB bootstrap configuration. Zero imports from the rest of the app.

Stores preferences that must be known before opening the DB (db_folder,
log_level). Config lives in ~/.fintrack/config.json to avoid a bootstrapping
problem. FINTRACK_DB_FOLDER in the environment wins over the file.
"""
import json
import os
from pathlib import Path

CONFIG_DIR = Path.home() / ".fintrack"
CONFIG_FILE = CONFIG_DIR / "config.json"
DB_FOLDER_ENV = "FINTRACK_DB_FOLDER"


def load_config() -> dict:
    """Returns {} on missing or corrupt file; never raises."""
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict) -> None:
    """Creates ~/.fintrack/ if needed; atomic write via .tmp + os.replace()."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    tmp = CONFIG_FILE.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, CONFIG_FILE)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def get_db_folder() -> str | None:
    """Return $FINTRACK_DB_FOLDER, else config["db_folder"], else None."""
    return os.environ.get(DB_FOLDER_ENV) or load_config().get("db_folder")


def set_db_folder(path: str | None) -> None:
    """Update db_folder in config and save."""
    config = load_config()
    if path is None:
        config.pop("db_folder", None)
    else:
        config["db_folder"] = path
    save_config(config)


def get_log_level(default: str = "WARNING") -> str:
    return str(load_config().get("log_level") or default).upper()
