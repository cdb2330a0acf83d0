"""Logging utilities for the SMTP bridge.

The actual logging setup (level, handlers, format) is performed once via
``logging.basicConfig()`` in the entry point to avoid duplicate handlers.

Example:
    Typical usage in a module::

        from smtp_bridge.logger import get_logger

        logger = get_logger("smtp_bridge.handler")
        logger.info("email sent")
"""

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "smtp_bridge") -> logging.Logger:
    """Return the logger bound to ``name`` without configuring handlers."""
    return logging.getLogger(name)


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger from ``level`` (a level name such as ``DEBUG``).

    Unknown level names fall back to ``INFO``.
    """
    resolved = getattr(logging, (level or "INFO").upper(), logging.INFO)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        force=True,  # Force reconfiguration to avoid duplicate handlers
    )
