"""Logging configuration and setup."""

import json
import logging
import os
import sys
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from shiprocket_recon.config.constants import TIMEZONE_NAME

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

log_dir = Path(os.getenv("LOG_DIR", "logs"))
log_dir.mkdir(parents=True, exist_ok=True)

IST_TZ = ZoneInfo(TIMEZONE_NAME)

# Distinguishes multiple app starts on the same day
SESSION_ID = str(uuid.uuid4())[:8]

LOG_DATE = datetime.now(IST_TZ).strftime("%Y-%m-%d")
LOG_FILENAME = f"reconciliation_{LOG_DATE}_{SESSION_ID}.log"

# Reconciliation context copied into the JSON payload when passed via `extra=`
EXTRA_FIELDS = ("run_id", "order_number", "awb_code", "outcome")


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON (India Standard Time)."""
        log_data = {
            "timestamp": datetime.now(IST_TZ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


root_logger = logging.getLogger()
root_logger.setLevel(logging.DEBUG)

if not root_logger.handlers:
    file_handler = logging.FileHandler(log_dir / LOG_FILENAME)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(JSONFormatter())

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    console_handler.setFormatter(JSONFormatter())

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

# httpx logs every request at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)


def setup_logger(name: str) -> logging.Logger:
    """Get logger for a module."""
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger


def new_run_id() -> str:
    """Short id tying together the log lines of one reconciliation run."""
    return uuid.uuid4().hex[:12]


def order_context(run_id=None, order_number=None, awb_code=None, outcome=None) -> dict:
    """Build the `extra=` dict for a reconciliation log line, skipping unset fields."""
    context = {
        "run_id": run_id,
        "order_number": order_number,
        "awb_code": awb_code or None,
        "outcome": outcome,
    }
    return {key: value for key, value in context.items() if value is not None}


logger = setup_logger("shiprocket_recon")
