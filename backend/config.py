"""
Configuration constants for the calculator.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# History persistence
HISTORY_FILE = Path(
    os.getenv("CALC_HISTORY_FILE", str(Path.home() / ".pinnacle_calc" / "history.json"))
).expanduser()
HISTORY_KEY = os.getenv("CALC_HISTORY_KEY", "calc.history.v1")

# Number of history rows shown in the overlay
HISTORY_VIEW_LIMIT = int(os.getenv("CALC_HISTORY_VIEW_LIMIT", "200"))

# Logging
LOG_LEVEL = os.getenv("CALC_LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("CALC_LOG_FILE") or None
LOG_MAX_BYTES = int(os.getenv("CALC_LOG_MAX_BYTES", str(1 * 1024 * 1024)))  # 1MB
LOG_BACKUP_COUNT = int(os.getenv("CALC_LOG_BACKUP_COUNT", "3"))
