"""Logging setup for Lexicon.

The level comes from, in order: the ``level`` argument, the ``LOG_LEVEL``
environment variable, the ``log_level`` setting in the user's config, INFO.
"""

import logging
import os
from typing import Optional


DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Transport loggers that flood INFO with connection chatter during lookups
NOISY_LOGGERS = ("urllib3", "asyncio")


def resolve_level(level: Optional[str] = None, config=None) -> int:
    """Pick the effective log level as a ``logging`` constant."""
    name = level or os.getenv("LOG_LEVEL")
    if not name and config is not None:
        name = config.get("log_level")
    resolved = getattr(logging, (name or DEFAULT_LEVEL).upper(), None)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None, config=None) -> int:
    """Initialize the root logger with a single stream handler.

    ``config`` is anything with a ``get`` method, normally a ConfigManager.
    Returns the level that was applied.
    """
    resolved_level = resolve_level(level, config)

    root = logging.getLogger()
    root.setLevel(resolved_level)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))
    return resolved_level
