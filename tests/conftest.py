from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. An in-memory directory double shared by the core and CLI tests.
"""

import os
import sys
from typing import Callable, Dict, Iterable, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from orgwalk.domain.directory_models import UserRecord  # noqa: E402


# -----------------------------------------------------------------------------
# Directory Double
# -----------------------------------------------------------------------------
def make_user(name: str, **metadata: Optional[str]) -> UserRecord:
    """Build a record whose id is derived from the display name."""
    return UserRecord(id=f"id-{name.lower()}", display_name=name, **metadata)


class FakeDirectory:
    """
    In-memory stand-in for the Directory Client.

    Reporting lines are declared by display name. Failures can be injected
    per manager name.
    """

    def __init__(
            self,
            reports: Dict[str, Iterable[str]],
            failures: Optional[Dict[str, Exception]] = None,
            users: Optional[Iterable[UserRecord]] = None,
    ) -> None:
        self.users: Dict[str, UserRecord] = {}
        for user in users or []:
            self.users[user.display_name] = user
        for manager, names in reports.items():
            for name in [manager, *names]:
                self.users.setdefault(name, make_user(name))
        self.reports = {m: list(n) for m, n in reports.items()}
        self.failures = {self.users[m].id: e for m, e in (failures or {}).items()}
        self.report_calls: List[str] = []
        self.search_calls: List[str] = []
        self.closed = False

    def search_users(self, query: str) -> List[UserRecord]:
        self.search_calls.append(query)
        needle = query.casefold()
        return [u for u in self.users.values() if needle in u.display_name.casefold()]

    def list_direct_reports(self, user_id: str) -> List[UserRecord]:
        self.report_calls.append(user_id)
        if user_id in self.failures:
            raise self.failures[user_id]
        manager = next(u for u in self.users.values() if u.id == user_id)
        return [self.users[name] for name in self.reports.get(manager.display_name, [])]

    def close(self) -> None:
        self.closed = True


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def user_factory() -> Callable[..., UserRecord]:
    return make_user


@pytest.fixture
def directory_factory() -> Callable[..., FakeDirectory]:
    return FakeDirectory


@pytest.fixture
def org_chart() -> FakeDirectory:
    """
    Alice manages Bob and Carol; Bob manages Dave; Carol has no reports.
    """
    return FakeDirectory({"Alice": ["Bob", "Carol"], "Bob": ["Dave"], "Carol": []})
