from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "Daygrid"
APP_AUTHOR = "Daygrid"
DATA_DIR = Path(os.getenv("DAYGRID_DATA_DIR") or user_data_dir(APP_NAME, APP_AUTHOR))
PREFERENCES_FILE = DATA_DIR / "preferences.json"


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
