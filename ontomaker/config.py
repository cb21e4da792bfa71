"""
Configuration management for OntoMaker.

Settings are read from environment variables first (a .env file is loaded by
app.py), then from config.json in the project root beside app.py:

- theme            / ONTOMAKER_THEME            'light' or 'dark'
- log_level        / ONTOMAKER_LOG_LEVEL        logging level name
- export_base_uri  / ONTOMAKER_EXPORT_BASE_URI  prefix for generated entity ids
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from ontomaker.canvas.constants import THEMES

logger = logging.getLogger(__name__)

DEFAULTS = {
    "theme": "light",
    "log_level": "INFO",
    "export_base_uri": "http://example.org",
}


def get_config_path() -> Path:
    return Path(__file__).resolve().parent.parent / "config.json"


def load_config() -> dict:
    """Stored settings, or {} when config.json is missing or unreadable."""
    path = get_config_path()
    if not path.exists():
        return {}
    try:
        stored = json.loads(path.read_text(encoding='utf-8'))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable {path.name}: {e}")
        return {}
    return stored if isinstance(stored, dict) else {}


def save_config(config: dict) -> None:
    get_config_path().write_text(json.dumps(config, indent=2), encoding='utf-8')


def get_setting(name: str) -> Optional[str]:
    """
    Get a setting.

    Priority:
    1. Environment variable ONTOMAKER_<NAME>
    2. Stored in config.json
    3. Built-in default
    """
    env_value = os.environ.get(f"ONTOMAKER_{name.upper()}")
    if env_value:
        return env_value
    return load_config().get(name, DEFAULTS.get(name))


def get_theme() -> str:
    theme = get_setting("theme")
    return theme if theme in THEMES else DEFAULTS["theme"]


def set_theme(theme: str) -> None:
    """Persist the theme choice to config.json."""
    if theme not in THEMES:
        raise ValueError(f"Unknown theme '{theme}'")
    config = load_config()
    config["theme"] = theme
    save_config(config)


def get_export_base_uri() -> str:
    return get_setting("export_base_uri") or DEFAULTS["export_base_uri"]


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging from the configured level."""
    level_name = (level or get_setting("log_level") or DEFAULTS["log_level"]).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
