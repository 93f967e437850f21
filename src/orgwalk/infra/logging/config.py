from __future__ import annotations

"""
Logging Configuration Models.

Defines the structure used to initialize the diagnostic subsystem. Console
diagnostics always target stderr because stdout carries the CSV rows.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Third-party loggers that are too chatty at DEBUG
NOISY_LOGGERS = ("urllib3", "requests")


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable specification for the logging subsystem.

    Attributes:
        level: Minimum severity level to capture.
        console: Emit diagnostics on stderr.
        log_file: Optional path for a rotating diagnostic file.
        max_bytes: Size threshold before the log file rotates.
        backup_count: Number of rotated files to keep.
        console_fmt: Format for terminal output.
        file_fmt: Format for file entries.
        datefmt: Timestamp format for file entries.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
