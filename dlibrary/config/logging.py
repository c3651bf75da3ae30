"""Logging setup for the application process."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Install a single stream handler on the root logger.

    Safe to call more than once: an existing handler is reused and only
    the level is updated.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if not any(getattr(h, "_dlibrary", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._dlibrary = True  # type: ignore[attr-defined]
        root.addHandler(handler)
