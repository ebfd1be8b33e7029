#!/usr/bin/env python3
"""
Entry point for the Calculator application.

Run:

    python main.py

History is kept in the JSON file named by CALC_HISTORY_FILE
(default ~/.pinnacle_calc/history.json). Settings can also come from a
.env file; see backend/config.py.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Optional: ensure current repo root is on sys.path so relative imports work
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import (
    HISTORY_FILE, HISTORY_KEY, LOG_LEVEL, LOG_FILE, LOG_MAX_BYTES, LOG_BACKUP_COUNT,
)
from backend.engine import CalculatorEngine
from backend.history import HistoryStore
from backend.storage import JsonFileStore

logger = logging.getLogger(__name__)


def configure_logging():
    # Console handler — human-readable
    handlers = [logging.StreamHandler()]
    if LOG_FILE:
        handlers.append(
            RotatingFileHandler(LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logging.basicConfig(level=LOG_LEVEL, handlers=handlers)


def build_engine() -> CalculatorEngine:
    history = HistoryStore(JsonFileStore(HISTORY_FILE), key=HISTORY_KEY)
    return CalculatorEngine(history)


def main():
    configure_logging()
    logger.info(f"Starting calculator (history: {HISTORY_FILE})")

    # Tkinter is only needed for the window itself
    from frontend.gui import CalculatorGUI

    app = CalculatorGUI(build_engine())
    app.mainloop()


if __name__ == "__main__":
    main()
