"""
Errors raised by goto, and error logging for the CLI.

Logs full stack traces for debugging while showing clean messages to users.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path

ERROR_LOG_FILENAME = ".goto-errors.log"


class GotoError(Exception):
    """Base class for all goto errors."""


class EmptyTagError(GotoError, ValueError):
    """A tag normalized to the empty string."""


class InvalidUrlError(GotoError, ValueError):
    """Input could not be parsed as an absolute URL."""


class RecordNotFoundError(GotoError):
    """No record file exists at the expected path."""

    def __init__(self, path: Path):
        super().__init__(f"Bookmark not found: {path}")
        self.path = path


class NotAFileError(GotoError):
    """The record path exists but is not a regular file."""

    def __init__(self, path: Path):
        super().__init__(f"Not a file: {path}")
        self.path = path


class MalformedRecordError(GotoError):
    """A record file could not be deserialized."""


DeserializeError = MalformedRecordError


class SerializeError(GotoError):
    """A bookmark could not be serialized. Indicates a programming error."""


class StoreIOError(GotoError):
    """Filesystem failure while reading or writing the store."""

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"{cause.strerror or cause} ({path})")
        self.path = path
        self.__cause__ = cause


class BrowserOpenError(GotoError):
    """The system did not acknowledge opening a URL."""


class SyncError(GotoError):
    """A git operation during sync failed."""


class PromptCancelled(GotoError):
    """The user cancelled an interactive prompt."""


def _error_log_path() -> Path:
    """Resolve error log path, respecting GOTO_DIR."""
    store = os.environ.get("GOTO_DIR")
    if store:
        return Path(store) / ERROR_LOG_FILENAME
    return Path.home() / ".goto" / ERROR_LOG_FILENAME


def log_exception(exc: Exception, context: str = "") -> Path:
    """
    Log exception with full traceback to file.

    Args:
        exc: The exception that occurred
        context: Optional context string (e.g., command name)

    Returns:
        Path to the error log file
    """
    log_path = _error_log_path()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"[{timestamp}]")
            if context:
                f.write(f" {context}")
            f.write("\n")
            f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    except OSError:
        pass  # Error log is best effort
    return log_path
