"""
Logging configuration for goto.

Quiet by default: only warnings and errors reach stderr.
"""

import logging
import sys
import warnings
from logging.handlers import RotatingFileHandler
from pathlib import Path

OPS_LOG_FILENAME = ".goto-ops.log"

# --verbosity 0..5
_VERBOSITY_LEVELS = {
    0: logging.CRITICAL,
    1: logging.ERROR,
    2: logging.WARNING,
    3: logging.INFO,
    4: logging.DEBUG,
    5: logging.DEBUG,
}

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _stderr_handler(root_logger: logging.Logger) -> logging.Handler:
    """The root stderr handler, installed once."""
    for h in root_logger.handlers:
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            return h
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    root_logger.addHandler(handler)
    return handler


def configure_quiet_mode(quiet: bool = True):
    """
    Configure logging to show only warnings and errors.

    Args:
        quiet: If True, also silence Python warnings and chatty HTTP
            libraries.
    """
    root_logger = logging.getLogger()
    handler = _stderr_handler(root_logger)
    handler.setLevel(logging.WARNING)
    root_logger.setLevel(logging.WARNING)
    if quiet:
        warnings.filterwarnings("ignore")
        logging.getLogger("urllib3").setLevel(logging.ERROR)
        logging.getLogger("requests").setLevel(logging.ERROR)


def set_verbosity(level: int):
    """Map a 0-5 verbosity level onto the goto logger."""
    level = max(0, min(5, level))
    log_level = _VERBOSITY_LEVELS[level]
    root_logger = logging.getLogger()
    handler = _stderr_handler(root_logger)
    handler.setLevel(log_level)
    root_logger.setLevel(log_level)
    logging.getLogger("goto").setLevel(log_level)
    if level >= 5:
        logging.getLogger("urllib3").setLevel(logging.DEBUG)


def enable_debug_mode():
    """Enable debug-level logging to stderr."""
    warnings.filterwarnings("default")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    _stderr_handler(root_logger).setLevel(logging.DEBUG)

    for name in ("goto", "urllib3"):
        logging.getLogger(name).setLevel(logging.DEBUG)


def configure_ops_log(store_path):
    """Configure a persistent operations log for a store.

    Writes to {store_path}/.goto-ops.log using a rotating file handler
    (1MB max, 3 backups). Records saves and deletes.
    Returns the handler so it can be removed on exit.
    """
    log_path = Path(store_path) / OPS_LOG_FILENAME
    handler = RotatingFileHandler(
        str(log_path),
        maxBytes=1_000_000,
        backupCount=3,
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    goto_logger = logging.getLogger("goto")
    goto_logger.addHandler(handler)
    # Let INFO through to the file even when stderr is quiet
    if goto_logger.level == logging.NOTSET or goto_logger.level > logging.INFO:
        goto_logger.setLevel(logging.INFO)

    return handler
