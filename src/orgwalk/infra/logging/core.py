from __future__ import annotations

"""
Logging Core Orchestrator.

Maintains the idempotent lifecycle of the logging subsystem. Records are
pushed through a QueueHandler and written by a QueueListener thread, so
traversal workers never block on diagnostic I/O.
"""

import atexit
import logging
import os
import queue
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from orgwalk.infra.fs import get_user_data_dir
from orgwalk.infra.logging.config import _LEVEL_MAP, NOISY_LOGGERS, LoggingConfig
from orgwalk.infra.logging.handlers import (
    _create_console_handler,
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

_CONFIGURED_FLAG_ATTR: str = "_orgwalk_configured"
_QUEUE_LISTENER_ATTR: str = "_orgwalk_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_default_log_path(file_name: str = "orgwalk.log") -> str:
    """Resolve the diagnostic log path within the user data directory."""
    return os.path.join(get_user_data_dir(), "logs", file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the root logger once, routing records through a queue.

    Subsequent calls are no-ops unless force is set, in which case the
    previously installed handlers and listener are torn down first.

    Args:
        cfg: Structural configuration for the logging system.
        force: Re-initialize even if already configured.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()

    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    level_int = _parse_level(cfg.level)
    root.setLevel(level_int)

    _remove_our_handlers(root)
    _stop_existing_listener(root)

    handlers_list: List[logging.Handler] = []

    if cfg.console:
        handlers_list.append(
            _create_console_handler(level_int, logging.Formatter(cfg.console_fmt))
        )

    if cfg.log_file:
        fh = _create_rotating_file_handler(
            cfg.log_file,
            level_int,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if fh:
            handlers_list.append(fh)

    # HTTP internals stay at WARNING unless explicitly enabled
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level_int, logging.WARNING))

    if not handlers_list:
        setattr(root, _CONFIGURED_FLAG_ATTR, True)
        return root

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)

    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)

    listener = QueueListener(log_queue, *handlers_list, respect_handler_level=True)
    listener.start()

    root.addHandler(queue_handler)

    setattr(root, _QUEUE_LISTENER_ATTR, listener)
    setattr(root, _CONFIGURED_FLAG_ATTR, True)

    atexit.register(_safe_stop_listener, listener)

    return root


def shutdown_logging() -> None:
    """Flush pending records and detach the listener (used before exit)."""
    root = logging.getLogger()
    _stop_existing_listener(root)
    _remove_our_handlers(root)
    setattr(root, _CONFIGURED_FLAG_ATTR, False)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_level(level: str) -> int:
    """Convert a string-based logging level to its numeric constant."""
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)


def _remove_our_handlers(root: logging.Logger) -> None:
    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _stop_existing_listener(root: logging.Logger) -> None:
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """
    Stop a QueueListener, tolerating listeners that were already stopped.

    QueueListener.stop() fails on a second call because its thread handle
    is reset to None after the first join.
    """
    if listener is None:
        return
    if getattr(listener, "_thread", None) is not None:
        listener.stop()
