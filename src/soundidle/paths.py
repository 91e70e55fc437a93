from __future__ import annotations

import os
from pathlib import Path


def default_data_dir() -> Path:
    """Return the default SoundIdle data directory.

    Default: %APPDATA%\\SoundIdle\\ on Windows, otherwise ~/.soundidle
    """
    appdata = os.environ.get("APPDATA")
    if appdata:
        return Path(appdata) / "SoundIdle"
    return Path.home() / ".soundidle"


def default_config_path() -> Path:
    return default_data_dir() / "config.toml"
