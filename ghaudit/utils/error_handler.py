"""Centralized error handler for ghaudit commands."""

import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import click

from ghaudit.utils.logging import logger

from .constants import ERROR_LOG_FILE, GHAUDIT_DIR


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator that turns unexpected exceptions into a logged ClickException.

    click's own exceptions (usage errors, ``click.exceptions.Exit``) pass
    through untouched.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except click.exceptions.ClickException:
            raise
        except click.exceptions.Exit:
            raise
        except Exception as e:
            error_type = type(e).__name__
            error_msg = str(e)

            logger.opt(exception=True).error(
                "Command '{cmd}' failed: {err}",
                cmd=func.__name__,
                err=error_msg,
            )

            log_note = ""
            try:
                GHAUDIT_DIR.mkdir(parents=True, exist_ok=True)
                with open(ERROR_LOG_FILE, "a", encoding="utf-8") as f:
                    f.write("\n" + "=" * 80 + "\n")
                    f.write(f"[{datetime.now().isoformat()}] Error in command: {func.__name__}\n")
                    f.write("=" * 80 + "\n")
                    f.write(f"{error_type}: {error_msg}\n\n")
                    f.write(traceback.format_exc())
                    f.write("=" * 80 + "\n\n")
                log_note = f"\n\nFull traceback logged to: {ERROR_LOG_FILE}"
            except OSError as log_error:
                logger.warning("Could not write {path}: {err}", path=ERROR_LOG_FILE, err=str(log_error))

            raise click.ClickException(f"{error_type}: {error_msg}{log_note}") from e

    return wrapper
