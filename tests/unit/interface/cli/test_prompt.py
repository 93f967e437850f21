from __future__ import annotations

"""
Unit tests for the interactive console prompts.

Verifies the candidate menu, re-prompting on bad input and end-of-input
handling, all on stderr.
"""

import io

import pytest

from orgwalk.domain.directory_models import UserRecord
from orgwalk.interface.cli.prompt import console_selector, fixed_selector, prompt_for_query

CANDIDATES = [
    UserRecord(id="1", display_name="Jane Smith", mail="jane@contoso.com"),
    UserRecord(id="2", display_name="John Smith"),
    UserRecord(id="3", display_name="Ann Smithers", mail="ann@contoso.com"),
]


def test_console_selector_lists_candidates_and_returns_index():
    """TC-01: A valid 1-based answer becomes a 0-based index."""
    stdin, stderr = io.StringIO("2\n"), io.StringIO()

    index = console_selector(stdin, stderr)(CANDIDATES)

    menu = stderr.getvalue()
    assert index == 1
    assert "1. Jane Smith (Email: jane@contoso.com)" in menu
    assert "2. John Smith (Email: unknown)" in menu
    assert "Selected User: John Smith" in menu


def test_console_selector_reprompts_on_invalid_input():
    stdin, stderr = io.StringIO("abc\n0\n4\n3\n"), io.StringIO()

    index = console_selector(stdin, stderr)(CANDIDATES)

    assert index == 2
    assert stderr.getvalue().count("Invalid input. Please try again.") == 3


def test_console_selector_end_of_input_is_invalid():
    stdin, stderr = io.StringIO("7\n"), io.StringIO()

    assert console_selector(stdin, stderr)(CANDIDATES) == -1


def test_fixed_selector_is_one_based():
    assert fixed_selector(1)(CANDIDATES) == 0
    assert fixed_selector(3)(CANDIDATES) == 2


def test_prompt_for_query_reads_a_line():
    stderr = io.StringIO()

    assert prompt_for_query(io.StringIO("  Alice \n"), stderr) == "Alice"
    assert "display name" in stderr.getvalue()


def test_prompt_for_query_raises_on_eof():
    with pytest.raises(EOFError):
        prompt_for_query(io.StringIO(""), io.StringIO())
