# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "Aurelo"
COMPANY_NAME = "Aurelo"
DB_URL_ENV = "AURELO_DB_URL"


def user_data_dir() -> Path:
    """
    Returns a per-user data directory, e.g.:

    Windows:
        C:\\Users\\<User>\\AppData\\Roaming\\Aurelo\\Aurelo

    macOS:
        ~/Library/Application Support/Aurelo/Aurelo

    Linux:
        ~/.local/share/Aurelo/Aurelo
    """
    try:
        if sys.platform.startswith("win"):
            base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))

        path = base / COMPANY_NAME / APP_NAME
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        # Last-resort fallback: use home directory
        fallback = Path.home() / f".{APP_NAME.lower()}"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def default_db_path() -> Path:
    return user_data_dir() / "workspace.db"


def default_db_url() -> str:
    """``AURELO_DB_URL`` if set, else the SQLite file under the user data dir."""
    override = (os.getenv(DB_URL_ENV) or "").strip()
    if override:
        return override
    return f"sqlite:///{default_db_path().as_posix()}"
