"""Centralized logging configuration using Loguru with Pino-compatible output.

Usage:
    from ghaudit.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if GHAUDIT_LOG_LEVEL=DEBUG

Environment Variables:
    GHAUDIT_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: WARNING)
    GHAUDIT_LOG_JSON: 0|1 (default: 0, human-readable)
    GHAUDIT_LOG_FILE: path to log file (optional)
    GHAUDIT_REQUEST_ID: correlation ID for tracing a CI run across tools

Logs always go to stderr (or the log file); stdout is reserved for findings.
"""

import json
import os
import sys
import uuid

from loguru import logger

# Remove default handler
logger.remove()

# Pino-compatible numeric levels
PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_log_level = os.environ.get("GHAUDIT_LOG_LEVEL", "WARNING").upper()
_json_mode = os.environ.get("GHAUDIT_LOG_JSON", "0") == "1"
_log_file = os.environ.get("GHAUDIT_LOG_FILE")
_request_id = os.environ.get("GHAUDIT_REQUEST_ID") or str(uuid.uuid4())


def _pino_record(record) -> dict:
    """Build the Pino log object for a loguru record."""
    pino_log = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "request_id": record["extra"].get("request_id", _request_id),
    }

    for key, value in record["extra"].items():
        if key != "request_id":
            pino_log[key] = value

    if record["exception"]:
        pino_log["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }
    return pino_log


def pino_compatible_sink(message):
    """Write log records to stderr as Pino-compatible NDJSON.

    {"level":30,"time":1715629847123,"msg":"...","pid":12345,"request_id":"..."}
    """
    # Never call logger.* inside a sink - causes infinite recursion
    sys.stderr.write(json.dumps(_pino_record(message.record), default=str) + "\n")
    sys.stderr.flush()


_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")
logger.level("CRITICAL", color="<red><bold>")

_console_handler_id: int | None = None


def _add_console_handler(level: str) -> int:
    if _json_mode:
        return logger.add(pino_compatible_sink, level=level, colorize=False)
    return logger.add(
        sys.stderr,
        level=level,
        format=_human_format,
        colorize=None,  # Auto-detect: colors if TTY, plain if piped
    )


_console_handler_id = _add_console_handler(_log_level)

if _log_file:

    def _file_pino_sink(message):
        """Write Pino-format JSON to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(_pino_record(message.record), default=str) + "\n")

    logger.add(_file_pino_sink, level="DEBUG")


def set_console_level(level: str) -> None:
    """Replace the console handler with one at ``level``.

    Used by the CLI for --verbose/--quiet. The environment variable still
    decides the format (human or JSON).
    """
    global _console_handler_id, _log_level

    if _console_handler_id is not None:
        try:
            logger.remove(_console_handler_id)
        except ValueError:
            pass  # Already removed
    _log_level = level.upper()
    _console_handler_id = _add_console_handler(_log_level)


__all__ = [
    "logger",
    "set_console_level",
]
