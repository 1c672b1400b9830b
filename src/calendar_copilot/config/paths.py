from __future__ import annotations

from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "Calendar Copilot"
APP_AUTHOR = "CalendarCopilot"
DATA_DIR = Path(user_data_dir(APP_NAME, APP_AUTHOR))
