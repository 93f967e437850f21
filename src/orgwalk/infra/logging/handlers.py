from __future__ import annotations

"""
Logging Handlers and Low-Level Utilities.

Handler factories plus a tagging mechanism so the application can tell its
own handlers apart from ones attached by libraries or test harnesses.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from orgwalk.infra.fs import ensure_parent_dir

_HANDLER_TAG_ATTR: str = "_orgwalk_handler"


def _tag_handler(handler: logging.Handler) -> None:
    setattr(handler, _HANDLER_TAG_ATTR, True)


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def _create_console_handler(level_int: int, formatter: logging.Formatter) -> logging.StreamHandler:
    """Build a tagged stderr handler."""
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level_int)
    sh.setFormatter(formatter)
    _tag_handler(sh)
    return sh


def _create_rotating_file_handler(
        log_file: str,
        level_int: int,
        formatter: logging.Formatter,
        max_bytes: int,
        backup_count: int,
) -> Optional[RotatingFileHandler]:
    """
    Initialize a tagged RotatingFileHandler.

    Returns:
        Optional[RotatingFileHandler]: Configured handler, or None when the
                                       file cannot be opened.
    """
    try:
        ensure_parent_dir(log_file)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=int(max_bytes),
            backupCount=int(backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: Cannot open log file '{log_file}': {e}\n")
        return None

    fh.setLevel(level_int)
    fh.setFormatter(formatter)
    _tag_handler(fh)
    return fh
