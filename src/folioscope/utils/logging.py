"""Logging helpers shared by every folioscope module."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever sys.stderr is at emit time."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def configure_logging(level: int = logging.INFO, stream=None) -> None:
    """
    Install a single stream handler on the ``folioscope`` logger.

    Calling this more than once only adjusts the level.

    Args:
        level: Logging level for the package logger
        stream: Output stream (defaults to stderr)
    """
    global _configured
    root = logging.getLogger("folioscope")
    root.setLevel(level)
    if _configured:
        return
    handler = logging.StreamHandler(stream) if stream is not None else _StderrHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger namespaced under ``folioscope``."""
    if not name:
        return logging.getLogger("folioscope")
    if name == "folioscope" or name.startswith("folioscope."):
        return logging.getLogger(name)
    return logging.getLogger(f"folioscope.{name}")
