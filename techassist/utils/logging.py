"""
Logging setup for the ``techassist`` logger hierarchy.

Modules log through ``get_logger(__name__)``-style names under
``techassist``; third-party libraries that are chatty at INFO
(chromadb, httpx, sentence-transformers) are held at WARNING.
"""

from __future__ import annotations

import logging
import sys

from techassist.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("chromadb", "httpx", "httpcore", "openai", "sentence_transformers", "urllib3")

_configured = False


def resolve_log_level(level: int | str | None = None) -> int:
    """
    Explicit level, else ``settings.log_level``, else INFO in
    development and WARNING elsewhere.
    """
    if level is None:
        level = settings.log_level
    if level is None:
        return logging.INFO if settings.environment == "development" else logging.WARNING
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.INFO
    return level


def setup_logging(level: int | str | None = None) -> None:
    """Attach one stderr handler to the ``techassist`` logger (idempotent)."""
    global _configured
    if _configured:
        return

    resolved = resolve_log_level(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    app_logger = logging.getLogger("techassist")
    app_logger.setLevel(resolved)
    app_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``techassist`` namespace; configures logging on first use."""
    setup_logging()
    if name != "techassist" and not name.startswith("techassist."):
        name = f"techassist.{name}"
    return logging.getLogger(name)
