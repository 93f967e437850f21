from __future__ import annotations

"""
Interactive Console Prompts.

Console implementations of the name prompt and the candidate selection
callback. Prompts and menus go to stderr so stdout stays a clean CSV stream.
"""

import sys
from typing import Optional, Sequence, TextIO

from orgwalk.core.resolver import SelectionCallback
from orgwalk.domain.directory_models import UserRecord


def read_input(
        prompt: str,
        stdin: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
) -> str:
    """
    Show a prompt on stderr and read one line from stdin.

    Raises:
        EOFError: When stdin is exhausted.
    """
    err = stderr or sys.stderr
    err.write(prompt)
    err.flush()
    line = (stdin or sys.stdin).readline()
    if not line:
        raise EOFError("No input available")
    return line.strip()


def prompt_for_query(stdin: Optional[TextIO] = None, stderr: Optional[TextIO] = None) -> str:
    return read_input("Enter the display name to search: ", stdin, stderr)


def console_selector(
        stdin: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
) -> SelectionCallback:
    """
    Build a selection callback that lists candidates and asks for an index.

    Invalid answers are re-prompted. End of input yields -1, which the
    resolver rejects as an invalid selection.
    """

    def select(candidates: Sequence[UserRecord]) -> int:
        err = stderr or sys.stderr
        print("Select a user by entering the index number:", file=err)
        for i, user in enumerate(candidates, start=1):
            print(f"{i}. {user.describe()}", file=err)

        while True:
            try:
                raw = read_input("Enter the index of the selected user: ", stdin, err)
            except EOFError:
                return -1
            try:
                index = int(raw)
            except ValueError:
                index = 0
            if 1 <= index <= len(candidates):
                print(f"Selected User: {candidates[index - 1].describe()}", file=err)
                return index - 1
            print("Invalid input. Please try again.", file=err)

    return select


def fixed_selector(pick: int) -> SelectionCallback:
    """Selection callback for non-interactive runs; pick is 1-based."""

    def select(candidates: Sequence[UserRecord]) -> int:
        return pick - 1

    return select
