"""ghaudit utilities package."""

from .constants import ERROR_LOG_FILE, GHAUDIT_DIR, WORKFLOW_EXTENSIONS, WORKFLOWS_DIR
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .logging import logger

__all__ = [
    "ERROR_LOG_FILE",
    "GHAUDIT_DIR",
    "WORKFLOWS_DIR",
    "WORKFLOW_EXTENSIONS",
    "ExitCodes",
    "handle_exceptions",
    "logger",
]
