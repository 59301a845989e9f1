"""Bootstrap configuration. Zero imports from the rest of the app.

Stores settings that must be known before opening the DB (db_path, log_level).
Config lives in ~/.finance_tracker/config.json unless FINANCE_TRACKER_CONFIG
points elsewhere.
"""
import json
import os
from pathlib import Path

CONFIG_DIR = Path.home() / ".finance_tracker"
CONFIG_FILE = CONFIG_DIR / "config.json"
CONFIG_ENV_VAR = "FINANCE_TRACKER_CONFIG"

DEFAULTS = {
    "db_path": "finance.db",
    "log_level": "INFO",
}


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else CONFIG_FILE


def load_config() -> dict:
    """Returns defaults merged with the file contents; missing or corrupt file gives defaults."""
    config = dict(DEFAULTS)
    try:
        with open(config_path(), "r", encoding="utf-8") as f:
            stored = json.load(f)
    except (OSError, ValueError):
        return config
    if isinstance(stored, dict):
        config.update(stored)
    return config


def save_config(config: dict) -> None:
    """Creates the config directory if needed; atomic write via .tmp + os.replace()."""
    path = config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def get_db_path() -> str:
    return load_config()["db_path"]


def set_db_path(path: str | None) -> None:
    """Update db_path in config and save. None restores the default."""
    config = load_config()
    config["db_path"] = path or DEFAULTS["db_path"]
    save_config(config)


def get_log_level() -> str:
    return str(load_config().get("log_level", DEFAULTS["log_level"])).upper()
