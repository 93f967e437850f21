from __future__ import annotations

"""
Directory Error Taxonomy.

Exceptions raised across the directory, resolution and traversal layers.
Transport level failures are absorbed by the client retry policy; whatever
escapes is one of the types below.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from orgwalk.domain.directory_models import HierarchyNode, UserRecord


class DirectoryError(Exception):
    """Base class for all directory service failures."""


class AuthError(DirectoryError):
    """Credential is missing, invalid or expired."""


class NotFound(DirectoryError):
    """No directory user matched the query."""


class TransportError(DirectoryError):
    """Network or HTTP failure, or a response that could not be decoded."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimited(TransportError):
    """Backend throttling that outlasted the retry budget."""

    def __init__(self, message: str, retry_after: Optional[float] = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class InvalidSelection(DirectoryError):
    """Selection callback returned an index outside the candidate list."""


@dataclass(frozen=True)
class SubtreeFailure:
    """
    Records an expansion step that could not complete.

    Attributes:
        user: The node whose direct reports could not be listed.
        error: The exception that stopped the expansion.
    """
    user: "UserRecord"
    error: Exception

    def __str__(self) -> str:
        return f"{self.user.display_name} ({self.user.id}): {self.error}"


class PartialTraversal(Exception):
    """
    Traversal stopped before the whole hierarchy was expanded.

    Carries the tree built so far so callers can still emit it.
    """

    def __init__(
            self,
            tree: "HierarchyNode",
            failures: List[SubtreeFailure],
            cancelled: bool = False,
    ) -> None:
        self.tree = tree
        self.failures = list(failures)
        self.cancelled = cancelled
        reason = "cancelled" if cancelled else f"{len(self.failures)} subtree(s) failed"
        super().__init__(f"Partial traversal: {reason}")
