# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "LotScheduler"
COMPANY_NAME = "LotSchedule"


def user_data_dir() -> Path:
    """
    Returns a per-user data directory, e.g.:

    Windows:
        C:\\Users\\<User>\\AppData\\Roaming\\LotSchedule\\LotScheduler

    macOS:
        ~/Library/Application Support/LotSchedule/LotScheduler

    Linux:
        ~/.local/share/LotSchedule/LotScheduler
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
        # read-only home: fall back to a dot directory
        fallback = Path.home() / f".{APP_NAME}"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def default_db_path() -> Path:
    return user_data_dir() / "lot_schedule.db"
