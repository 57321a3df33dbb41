"""VibeGuard utilities package."""

from .constants import (
    DEFAULT_MAX_FILE_SIZE,
    ERROR_LOG_FILE,
    EXCLUDED_FOLDERS,
    SUPPORTED_LANGUAGES,
    VG_DIR,
)
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .languages import language_for_path
from .logging import logger

__all__ = [
    "VG_DIR",
    "ERROR_LOG_FILE",
    "DEFAULT_MAX_FILE_SIZE",
    "EXCLUDED_FOLDERS",
    "SUPPORTED_LANGUAGES",
    "handle_exceptions",
    "ExitCodes",
    "language_for_path",
    "logger",
]
