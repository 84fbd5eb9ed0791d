"""
Logging setup for Onboarder.

One stderr handler on the root logger. Production writes one JSON object
per line; development and testing write a short colored line. LOG_LEVEL
overrides the level (DEBUG outside production, INFO in production).

Onboarding steps pass their context through ``extra=``:

    logger.info("Parent ticket %s filed", issue_id,
                extra={"new_hire": "Ada Lovelace", "department": "Engineering",
                       "parent_issue_id": issue_id})

Both formatters pick those keys up; see ONBOARDING_FIELDS.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Record attributes set via extra= by the orchestrator and the Redmine gateway
ONBOARDING_FIELDS = (
    "new_hire",
    "department",
    "subject",
    "parent_issue_id",
    "issue_id",
    "tracker_status",
    "duration_ms",
)


def onboarding_context(record: logging.LogRecord) -> dict:
    """Return the ONBOARDING_FIELDS present on ``record``, in field order."""
    return {
        key: getattr(record, key)
        for key in ONBOARDING_FIELDS
        if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record; onboarding context keys sit at top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(onboarding_context(record))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL logger: message  key=value ...`` for terminals."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = f"{record.levelname:<8}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"
        line = f"{ts} {level} {record.name}: {record.getMessage()}"

        context = onboarding_context(record)
        if context:
            line += "  " + " ".join(f"{k}={v}" for k, v in context.items())
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app) -> logging.Handler:
    """Install the root handler for ``app`` and return it."""
    is_testing = app.config.get("TESTING", False)
    is_prod = not app.config.get("DEBUG", False) and not is_testing

    level_name = os.getenv("LOG_LEVEL", "INFO" if is_prod else "DEBUG").upper()
    level = getattr(logging, level_name, logging.INFO)

    if is_prod:
        formatter = JSONFormatter()
    else:
        formatter = ReadableFormatter(use_color=sys.stderr.isatty())

    # Replaces any earlier handler so repeated create_app() calls do not stack
    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(level)

    # Tracker traffic is logged by the gateway itself
    for noisy in ("urllib3", "werkzeug", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if not is_testing:
        app.logger.info("Logging configured: level=%s format=%s",
                        level_name, "json" if is_prod else "readable")
    return handler
