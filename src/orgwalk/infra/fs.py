from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path resolution for persistent application data
and the output sink used by the row emitter. Acts as an abstraction over
the 'os' module to ensure uniform behavior across Windows and Unix-like
systems.
"""

import contextlib
import os
import sys
from typing import Iterator, Optional, TextIO

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "OrgWalk"
UNIX_APP_DIR_NAME = ".orgwalk"
STDOUT_MARKER = "-"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Standards:
    - Windows: %LOCALAPPDATA%/OrgWalk
    - Linux/Mac: ~/.orgwalk

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    # Posix fallback (Linux/Mac)
    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str = "") -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is blank.

    Returns:
        str: Normalized absolute path, or "" when both inputs are blank.
    """
    p = (path or "").strip() or fallback
    if not p:
        return ""
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def ensure_parent_dir(path: str) -> None:
    """Create the parent directory hierarchy for a target file."""
    parent = os.path.dirname(os.path.abspath(path))
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)

# -----------------------------------------------------------------------------
# OUTPUT SINK
# -----------------------------------------------------------------------------

def is_stdout_target(path: Optional[str]) -> bool:
    return not path or path.strip() in ("", STDOUT_MARKER)


@contextlib.contextmanager
def open_sink(path: Optional[str]) -> Iterator[TextIO]:
    """
    Open the destination stream for emitted rows.

    Standard output is yielded as-is and never closed. Any other target is
    created (with its parent directories) as a UTF-8 text file.

    Args:
        path: Destination file path, or None/'-' for standard output.

    Raises:
        OSError: If the file cannot be created.
    """
    if is_stdout_target(path):
        yield sys.stdout
        return

    target = normalize_path(path)
    ensure_parent_dir(target)
    # newline="" lets the csv module own line terminators
    with open(target, "w", encoding="utf-8", newline="") as f:
        yield f
