"""Exception boundary for VibeGuard commands."""

import json
import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import click

from vibeguard.errors import VibeGuardError
from vibeguard.utils.logging import logger

from . import constants


def _append_error_log(command: str, error: Exception) -> None:
    """Append one JSON record per failure to .vibeguard/error.log."""
    record = {
        "time": datetime.now().isoformat(),
        "command": command,
        "type": type(error).__name__,
        "message": str(error),
        "traceback": traceback.format_exc(),
    }
    if isinstance(error, VibeGuardError):
        record.update(error.to_dict())

    constants.VG_DIR.mkdir(parents=True, exist_ok=True)
    with open(constants.ERROR_LOG_FILE, "a", encoding="utf-8") as f:
        f.write(json.dumps(record) + "\n")


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn command failures into a one-line ClickException.

    VibeGuard errors are reported by code (``CONFIG_ERROR: ...``); anything
    else is unexpected and is logged with its traceback. Both are appended
    to the error log.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except VibeGuardError as e:
            logger.error(f"Command '{func.__name__}' failed: [{e.code}] {e.message}")
            _append_error_log(func.__name__, e)
            raise click.ClickException(f"{e.code}: {e.message}") from e
        except Exception as e:
            logger.opt(exception=True).error(f"Command '{func.__name__}' crashed: {e}")
            _append_error_log(func.__name__, e)
            raise click.ClickException(
                f"{type(e).__name__}: {e}\n\n"
                f"Full traceback logged to: {constants.ERROR_LOG_FILE}"
            ) from e

    return wrapper
