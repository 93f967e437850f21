from __future__ import annotations

"""
Identity Resolution.

Turns a name fragment into exactly one directory user. Matching is left to
the directory client; ties are broken by a caller-supplied selection
callback so no console interaction lives in this module.
"""

import logging
from typing import Callable, Protocol, Sequence

from orgwalk.domain.directory_models import UserRecord
from orgwalk.domain.errors import InvalidSelection, NotFound

logger = logging.getLogger(__name__)

# Receives the candidates, returns the 0-based index of the chosen one
SelectionCallback = Callable[[Sequence[UserRecord]], int]


class UserSearch(Protocol):
    def search_users(self, query: str) -> Sequence[UserRecord]: ...


def resolve(client: UserSearch, query: str, select: SelectionCallback) -> UserRecord:
    """
    Resolve a name fragment to a single user.

    Args:
        client: Anything exposing search_users().
        query: Name fragment to look up.
        select: Invoked only when more than one user matches.

    Returns:
        UserRecord: The unique or selected match.

    Raises:
        ValueError: If the query is blank.
        NotFound: If nobody matches.
        InvalidSelection: If the callback picks an index outside the candidates.
    """
    term = (query or "").strip()
    if not term:
        raise ValueError("Search query must not be empty")

    candidates = list(client.search_users(term))

    if not candidates:
        raise NotFound(f"No users found with a display name containing '{term}'")

    if len(candidates) == 1:
        logger.debug(f"Query '{term}' resolved uniquely to {candidates[0].id}")
        return candidates[0]

    logger.info(f"Query '{term}' matched {len(candidates)} users; awaiting selection.")
    index = select(candidates)
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(candidates):
        raise InvalidSelection(f"Selection {index!r} is outside 0..{len(candidates) - 1}")

    chosen = candidates[index]
    logger.info(f"Selected user: {chosen.describe()}")
    return chosen


class IdentityResolver:
    """Binds a directory client and selection policy for repeated lookups."""

    def __init__(self, client: UserSearch, select: SelectionCallback) -> None:
        self._client = client
        self._select = select

    def resolve(self, query: str) -> UserRecord:
        return resolve(self._client, query, self._select)
