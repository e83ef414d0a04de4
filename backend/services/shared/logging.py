"""Structured logging for Prompt Architect.

Every logger lives under the "prompt_architect" namespace so the whole
backend can be tuned with one level.
"""
from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

_ROOT = "prompt_architect"
_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """Configure the prompt_architect root logger.

    Args:
        level: Log level string ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL").
        log_file: Optional path to a rotating file log.
        max_bytes: Max size before rotation (default 10 MB).
        backup_count: Number of rotated files to keep.

    Raises:
        ValueError: If level is not a valid log level string.
    """
    upper = level.upper()
    if upper not in _VALID_LEVELS:
        raise ValueError(f"Invalid log level: {level!r}. Must be one of {_VALID_LEVELS}")

    numeric = getattr(logging, upper)
    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger(_ROOT)
    root.setLevel(numeric)

    # Repeated calls (uvicorn reload, tests) must not stack handlers
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(numeric)
    console.setFormatter(fmt)
    root.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the prompt_architect namespace.

    Args:
        name: Sub-namespace, e.g. "composer.session" -> "prompt_architect.composer.session".
              Names that already start with "prompt_architect" are used as-is.
    """
    if name.startswith(_ROOT):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")
