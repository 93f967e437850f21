from __future__ import annotations

"""
Directory Domain Data Models.

Defines the typed records produced by the Directory Client and the
recursive node structure owned by the Hierarchy Walker. Raw backend JSON
never crosses this boundary untyped.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

UNKNOWN = "unknown"

# Job title / office keywords used for the workforce classification columns
VENDOR_TITLE_KEYWORDS: Tuple[str, ...] = ("CONSULT", "OUTSOURCE", "Outsource")
OFFSHORE_LOCATION_KEYWORDS: Tuple[str, ...] = ("Off-Shore", "Off-Site")

# -----------------------------------------------------------------------------
# DIRECTORY RECORDS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class UserRecord:
    """
    A single directory user as returned by the backend.

    Attributes:
        id: Stable opaque identifier.
        display_name: Human readable name.
        mail: Primary SMTP address, if any.
        job_title: Job title, if any.
        department: Department, if any.
        office_location: Office location, if any.
        user_principal_name: Sign-in name, if any.
    """
    id: str
    display_name: str
    mail: Optional[str] = None
    job_title: Optional[str] = None
    department: Optional[str] = None
    office_location: Optional[str] = None
    user_principal_name: Optional[str] = None

    @property
    def email_or_unknown(self) -> str:
        return self.mail or UNKNOWN

    @property
    def employment_type(self) -> str:
        """Vendor when the job title carries a contractor keyword."""
        title = self.job_title or ""
        if any(kw in title for kw in VENDOR_TITLE_KEYWORDS):
            return "Vendor"
        return "Employee"

    @property
    def location(self) -> str:
        office = self.office_location or ""
        if any(kw in office for kw in OFFSHORE_LOCATION_KEYWORDS):
            return "Off-Shore"
        return "On-Site"

    def describe(self) -> str:
        return f"{self.display_name} (Email: {self.email_or_unknown})"


@dataclass(frozen=True)
class UserPage:
    """
    One decoded page of a paginated listing.

    Attributes:
        users: Records contained in this page, in backend order.
        next_link: Continuation cursor for the next page, None when exhausted.
    """
    users: List[UserRecord]
    next_link: Optional[str] = None

# -----------------------------------------------------------------------------
# HIERARCHY STRUCTURE
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class HierarchyNode:
    """
    A user placed in the reporting tree.

    Children are owned by their parent and kept in the order the directory
    returned them. The parent reference is only used to render manager
    columns.
    """
    user: UserRecord
    depth: int = 0
    parent: Optional["HierarchyNode"] = field(default=None, repr=False)
    children: List["HierarchyNode"] = field(default_factory=list, repr=False)

    def add_child(self, user: UserRecord) -> "HierarchyNode":
        child = HierarchyNode(user=user, depth=self.depth + 1, parent=self)
        self.children.append(child)
        return child

    def walk(self) -> Iterator["HierarchyNode"]:
        """Yield this node and its descendants in pre-order."""
        stack: List[HierarchyNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def size(self) -> int:
        return sum(1 for _ in self.walk())


@dataclass(frozen=True)
class Row:
    """Flattened output record for a single tree node."""
    depth: int
    display_name: str
    id: str
    mail: str
    job_title: str
    department: str
    office_location: str
    employment_type: str
    location: str
    manager_id: str
    manager_display_name: str


ROW_FIELDS: Tuple[str, ...] = (
    "depth",
    "display_name",
    "id",
    "mail",
    "job_title",
    "department",
    "office_location",
    "employment_type",
    "location",
    "manager_id",
    "manager_display_name",
)
