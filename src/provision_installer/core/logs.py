"""Log file handling for a loaded scenario."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import Configuration

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def attach_log_file(config: Configuration, previous: Optional[logging.Handler] = None) -> logging.FileHandler:
    """Send the root logger to the scenario's log file.

    Falls back to the working directory when the configured log directory
    is not writable. ``previous`` is detached first, so a reloaded
    configuration can swap its log file.
    """
    detach_log_file(previous)

    log_path = config.log_file
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
    except OSError as e:
        fallback = Path.cwd() / config.app.log_name
        logger.warning(f"Cannot write log to {log_path} ({e}), using {fallback}")
        log_path = fallback
        handler = logging.FileHandler(log_path)

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(getattr(logging, config.app.log_level, logging.INFO))

    root = logging.getLogger()
    root.addHandler(handler)
    if root.level > handler.level:
        root.setLevel(handler.level)

    logger.info(f"Logging to {log_path}")
    return handler


def detach_log_file(handler: Optional[logging.Handler]) -> None:
    """Remove and close a handler returned by :func:`attach_log_file`."""
    if handler is None:
        return
    logging.getLogger().removeHandler(handler)
    handler.close()


def apply_verbose_log_level(handler: Optional[logging.Handler], config: Configuration) -> None:
    """Set the verbose console handler to the scenario's ``verbose_log_level``."""
    if handler is None:
        return
    handler.setLevel(getattr(logging, config.app.verbose_log_level, logging.INFO))
    logger.debug(f"Console log level set to {config.app.verbose_log_level} by {config.config_file}")
