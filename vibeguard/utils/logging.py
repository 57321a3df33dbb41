"""Loguru configuration shared by every VibeGuard module.

    from vibeguard.utils.logging import logger

    log = logger.bind(component="pipeline")
    log.debug("Analyzed app.js")

Every record carries ``component`` (default ``"vibeguard"``) and a per-process
``request_id``. The stderr format shows the component; JSON mode prints one
object per line with the numeric levels used by pino.

Environment Variables:
    VIBEGUARD_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    VIBEGUARD_LOG_JSON: 0|1 (default: 0, human-readable on stderr)
    VIBEGUARD_LOG_FILE: path to an NDJSON log file (optional)
    VIBEGUARD_REQUEST_ID: correlation ID stamped on every record
"""

import json
import os
import sys
import uuid
from pathlib import Path

from loguru import logger

from .constants import ENV_LOG_FILE, ENV_LOG_JSON, ENV_LOG_LEVEL, ENV_REQUEST_ID

NUMERIC_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

HUMAN_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[component]} | {name}:{line} - {message}"


def to_ndjson(record) -> str:
    """Serialize a loguru record as one JSON line."""
    payload = {
        "level": NUMERIC_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
    }
    payload.update(record["extra"])

    exception = record["exception"]
    if exception:
        payload["err"] = {
            "type": exception.type.__name__ if exception.type else "Error",
            "message": str(exception.value) if exception.value else "",
        }

    return json.dumps(payload, default=str)


def _stdout_json(message) -> None:
    # logger.* must not be called from inside a sink
    sys.stdout.write(to_ndjson(message.record) + "\n")
    sys.stdout.flush()


def _ndjson_file(path: str):
    def sink(message) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(to_ndjson(message.record) + "\n")

    return sink


def configure_logging(
    level: str | None = None,
    json_mode: bool | None = None,
    log_file: str | None = None,
    request_id: str | None = None,
) -> None:
    """Replace all handlers; unset arguments are read from the environment."""
    level = (level or os.environ.get(ENV_LOG_LEVEL, "INFO")).upper()
    if json_mode is None:
        json_mode = os.environ.get(ENV_LOG_JSON, "0") == "1"
    log_file = log_file or os.environ.get(ENV_LOG_FILE)
    request_id = request_id or os.environ.get(ENV_REQUEST_ID) or str(uuid.uuid4())

    if json_mode:
        handlers = [{"sink": _stdout_json, "level": level, "colorize": False}]
    else:
        handlers = [{"sink": sys.stderr, "level": level, "format": HUMAN_FORMAT}]
    if log_file:
        handlers.append({"sink": _ndjson_file(log_file), "level": "DEBUG"})

    logger.configure(
        handlers=handlers,
        extra={"component": "vibeguard", "request_id": request_id},
    )


def configure_file_logging(log_dir: Path, level: str = "DEBUG") -> int:
    """Add a rotating ``vibeguard.log`` in ``log_dir``; returns the handler id."""
    log_dir.mkdir(parents=True, exist_ok=True)
    return logger.add(
        log_dir / "vibeguard.log",
        rotation="10 MB",
        retention="7 days",
        level=level,
        format=FILE_FORMAT,
    )


configure_logging()

__all__ = [
    "logger",
    "configure_logging",
    "configure_file_logging",
    "to_ndjson",
]
