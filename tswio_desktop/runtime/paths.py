from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Mapping, Optional

APP_NAME = "TswIo"
APP_NAME_LOWER = "tsw_io"


def _platform_data_dir(env: Mapping[str, str], system: str) -> Path:
    home = Path(env.get("HOME") or Path.home())

    if system == "Darwin":
        return home / "Library" / "Application Support" / APP_NAME

    if system == "Windows":
        appdata = env.get("APPDATA") or env.get("LOCALAPPDATA") or "."
        return Path(appdata) / APP_NAME

    # Linux, BSD and everything else
    xdg_data = env.get("XDG_DATA_HOME")
    base_dir = Path(xdg_data) if xdg_data else home / ".local" / "share"
    return base_dir / APP_NAME_LOWER


def data_dir(env: Optional[Mapping[str, str]] = None, system: Optional[str] = None) -> Path:
    """Return the per-user data directory, creating it if needed.

    TSWIO_DATA_DIR overrides the platform default.
    """
    env = os.environ if env is None else env
    override = env.get("TSWIO_DATA_DIR")
    if override:
        path = Path(override).expanduser()
    else:
        path = _platform_data_dir(env, system or platform.system())
    path.mkdir(parents=True, exist_ok=True)
    return path


def log_file_path(env: Optional[Mapping[str, str]] = None) -> Path:
    return data_dir(env) / "startup.log"
