"""User settings for CapJournal, read from a TOML file."""

import logging
import os
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "capjournal"
DEFAULT_SETTINGS_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "capjournal.db"

SETTINGS_ENV_VAR = "CAPJOURNAL_CONFIG"


class Settings(BaseModel):
    """Application settings."""

    db_path: Path = Field(default=DEFAULT_DB_PATH, description="SQLite database file")
    currency: str = Field(default="$", description="Symbol shown before amounts")

    model_config = {"frozen": True}


def settings_path() -> Path:
    override = os.environ.get(SETTINGS_ENV_VAR)
    return Path(override).expanduser() if override else DEFAULT_SETTINGS_PATH


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a TOML file.

    A missing or unreadable file yields the defaults.

    Example file:
      [storage]
      db_path = "~/journals/main.db"

      [display]
      currency = "€"

    Args:
        path: Settings file; defaults to settings_path().

    Returns:
        Settings.
    """
    path = path or settings_path()
    if not path.exists():
        return Settings()

    try:
        data = toml.load(path)
    except (toml.TomlDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return Settings()

    values = {}
    db_path = data.get("storage", {}).get("db_path")
    if db_path:
        values["db_path"] = Path(db_path).expanduser()
    currency = data.get("display", {}).get("currency")
    if currency:
        values["currency"] = currency

    try:
        return Settings(**values)
    except PydanticValidationError as e:
        logger.warning("Ignoring invalid settings in %s: %s", path, e)
        return Settings()
