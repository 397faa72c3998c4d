"""
Logging setup for ThinkCheck.

Development gets colored single-line console output, production gets one
JSON object per line. When LOG_DIR is set, rotating JSON files are written
as well (everything, plus a separate errors-only file).

Every record is stamped with the id of the HTTP request being served, so the
lines of one request can be grepped together.
"""

import json
import logging
import logging.handlers
import sys
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# 10MB per file, keep 5 backups
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

# file name -> minimum level
LOG_FILES: Dict[str, int] = {
    "thinkcheck.log": logging.DEBUG,
    "thinkcheck-errors.log": logging.ERROR,
}

# Chatty third-party loggers
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class RequestContextFilter(logging.Filter):
    """Copy the current request id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        for key in ("request_id", "status_code", "duration_ms"):
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """[LEVEL] logger:line [request] message, colored by level."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        request_id = getattr(record, "request_id", None)
        tag = f" [{request_id}]" if request_id else ""

        line = f"{color}{record.levelname:<8}{self.RESET} {record.name}:{record.lineno}{tag} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(
    environment: str = "development",
    log_level: str = "INFO",
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure the root logger. Safe to call more than once; earlier
    handlers are replaced.

    Args:
        environment: "production" switches the console to JSON
        log_level: Minimum level name (DEBUG ... CRITICAL)
        log_dir: Directory for rotating log files, None for console only
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(JSONFormatter() if environment == "production" else ConsoleFormatter())
    handlers = [console]

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.extend(_file_handler(log_dir / name, file_level) for name, file_level in LOG_FILES.items())

    context_filter = RequestContextFilter()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.addFilter(context_filter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).info(
        f"Logging configured: environment={environment}, level={logging.getLevelName(level)}, "
        f"log_dir={log_dir or '-'}"
    )


def log_request(method: str, path: str, status_code: int, started: float) -> None:
    """Access-log line for one finished request (``started`` from time.perf_counter())."""
    duration_ms = round((time.perf_counter() - started) * 1000, 1)
    level = logging.WARNING if status_code >= 500 else logging.INFO
    logging.getLogger("thinkcheck.access").log(
        level,
        f"{method} {path} -> {status_code} ({duration_ms}ms)",
        extra={"status_code": status_code, "duration_ms": duration_ms},
    )
