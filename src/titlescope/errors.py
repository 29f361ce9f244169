"""Error log and user-facing error messages."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

LOG_FILENAME = "titlescope_errors.log"


def _get_log_file_path() -> Path:
    """Get the path to the error log file (in exe folder or cwd)."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent / LOG_FILENAME
    return Path.cwd() / LOG_FILENAME


def log_error(error: Exception | str, context: str = "") -> None:
    """Append an error to the log file.

    Args:
        error: The error (exception or string).
        context: Optional context about where the error occurred.
    """
    try:
        log_path = _get_log_file_path()
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        if isinstance(error, str):
            message = error
            error_type = "Message"
        else:
            message = str(error)
            error_type = type(error).__name__

        log_entry = f"[{timestamp}] {error_type}"
        if context:
            log_entry += f" ({context})"
        log_entry += f": {message}\n"

        with open(log_path, "a", encoding="utf-8") as f:
            f.write(log_entry)
    except OSError:
        # Don't let logging errors crash the app
        pass


def get_friendly_message(error: Exception) -> str:
    """Translate an exception into a short message for the user."""
    from titlescope.qui import (
        QuiConnectionError,
        QuiError,
        QuiNotFoundError,
        QuiRateLimitError,
    )
    from titlescope.titles.actions import UnknownActionError

    if isinstance(error, QuiConnectionError):
        return "Could not reach the torrent manager. Check the URL and that it is running."
    if isinstance(error, QuiNotFoundError):
        return "Instance or torrent not found. Check the instance ID."
    if isinstance(error, QuiRateLimitError):
        return "The torrent manager is rate limiting requests. Try again shortly."
    if isinstance(error, UnknownActionError):
        return str(error)
    if isinstance(error, QuiError):
        return f"Torrent manager error: {error}"
    return f"Unexpected error: {error}"
