"""User configuration for dustpan."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

log = logging.getLogger(__name__)

CONFIG_DIR = Path(os.path.expanduser("~/.dustpan"))
CONFIG_FILE = CONFIG_DIR / "config.json"
CONFIG_ENV_VAR = "DUSTPAN_CONFIG"


class Settings(BaseModel):
    """Settings read from ``~/.dustpan/config.json``."""

    default_max_depth: int = Field(10, ge=0, description="Depth limit when none is given")
    max_workers: Optional[int] = Field(
        None, ge=1, description="Worker threads for sizing (default: CPU count)"
    )
    cache_file: Optional[str] = Field(None, description="Alternative scan cache location")
    use_index: bool = Field(False, description="Try the system index before walking")


def get_config_path() -> Path:
    """Location of the config file, honoring DUSTPAN_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(os.path.expanduser(override))
    return CONFIG_FILE


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults on any problem."""
    config_path = get_config_path()
    if not config_path.exists():
        return Settings()

    try:
        with open(config_path) as f:
            return Settings.model_validate(json.load(f))
    except (json.JSONDecodeError, OSError, ValidationError) as e:
        log.warning("Ignoring invalid config file %s: %s", config_path, e)
        return Settings()


def save_settings(settings: Settings) -> bool:
    """Save settings to disk."""
    config_path = get_config_path()
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(settings.model_dump(), f, indent=2)
        return True
    except OSError as e:
        log.warning("Could not write config file %s: %s", config_path, e)
        return False
