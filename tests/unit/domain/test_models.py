from __future__ import annotations

"""
Unit tests for Domain Data Models.

Verifies immutability, classification properties, tree navigation and the
result factory functions.
"""

from dataclasses import FrozenInstanceError

import pytest

from orgwalk.domain.directory_models import UNKNOWN, HierarchyNode, UserRecord
from orgwalk.domain.errors import (
    AuthError,
    DirectoryError,
    PartialTraversal,
    RateLimited,
    SubtreeFailure,
    TransportError,
)
from orgwalk.domain.export_models import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_NOT_FOUND,
    EXIT_OK,
    create_error_result,
    create_export_result,
)

# -----------------------------------------------------------------------------
# DIRECTORY RECORDS
# -----------------------------------------------------------------------------

def test_user_record_is_immutable():
    """TC-01: Records cannot be mutated after decoding."""
    user = UserRecord(id="1", display_name="Alice")

    with pytest.raises(FrozenInstanceError):
        user.display_name = "Mallory"  # type: ignore[misc]


def test_user_record_describe_and_placeholders():
    user = UserRecord(id="1", display_name="Alice")

    assert user.email_or_unknown == UNKNOWN
    assert user.describe() == "Alice (Email: unknown)"
    assert UserRecord(id="2", display_name="Bob", mail="bob@x.org").describe() == "Bob (Email: bob@x.org)"


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Senior CONSULTANT", "Vendor"),
        ("OUTSOURCED Support", "Vendor"),
        ("Outsource Partner", "Vendor"),
        ("Software Engineer", "Employee"),
        (None, "Employee"),
    ],
)
def test_user_record_employment_type(title, expected):
    assert UserRecord(id="1", display_name="A", job_title=title).employment_type == expected


@pytest.mark.parametrize(
    "office, expected",
    [("Off-Shore Chennai", "Off-Shore"), ("Off-Site", "Off-Shore"), ("HQ Floor 3", "On-Site"), (None, "On-Site")],
)
def test_user_record_location(office, expected):
    assert UserRecord(id="1", display_name="A", office_location=office).location == expected

# -----------------------------------------------------------------------------
# HIERARCHY NODES
# -----------------------------------------------------------------------------

def test_hierarchy_node_add_child_and_walk(user_factory):
    root = HierarchyNode(user=user_factory("Alice"))
    bob = root.add_child(user_factory("Bob"))
    root.add_child(user_factory("Carol"))
    dave = bob.add_child(user_factory("Dave"))

    assert dave.depth == 2
    assert dave.parent is bob
    assert [n.user.display_name for n in root.walk()] == ["Alice", "Bob", "Dave", "Carol"]
    assert root.size() == 4
    assert bob.size() == 2


def test_hierarchy_node_walk_handles_deep_chains(user_factory):
    root = HierarchyNode(user=user_factory("N0"))
    node = root
    for i in range(1, 5000):
        node = node.add_child(user_factory(f"N{i}"))

    assert root.size() == 5000
    assert node.depth == 4999

# -----------------------------------------------------------------------------
# ERRORS
# -----------------------------------------------------------------------------

def test_error_hierarchy():
    assert issubclass(AuthError, DirectoryError)
    assert issubclass(RateLimited, TransportError)

    limited = RateLimited("slow down", retry_after=12.0)
    assert limited.status_code == 429
    assert limited.retry_after == 12.0


def test_partial_traversal_carries_tree(user_factory):
    tree = HierarchyNode(user=user_factory("Alice"))
    failure = SubtreeFailure(user=user_factory("Bob"), error=TransportError("HTTP 503"))

    partial = PartialTraversal(tree, [failure])

    assert partial.tree is tree
    assert partial.failures == [failure]
    assert partial.cancelled is False
    assert str(failure) == "Bob (id-bob): HTTP 503"
    assert "1 subtree(s) failed" in str(partial)

# -----------------------------------------------------------------------------
# RESULT FACTORIES
# -----------------------------------------------------------------------------

def test_create_export_result_ok(user_factory):
    result = create_export_result(user_factory("Alice"), rows_written=4, output_path="")

    assert result.ok is True
    assert result.exit_code == EXIT_OK
    assert result.partial is False
    assert result.root_id == "id-alice"


def test_create_export_result_partial(user_factory):
    result = create_export_result(user_factory("Alice"), 3, "/tmp/o.csv", failures=["Bob (id-bob): boom"])

    assert result.ok is False
    assert result.partial is True
    assert result.exit_code == EXIT_FAILURE
    assert "1 subtree(s)" in result.error


def test_create_export_result_cancelled_wins(user_factory):
    result = create_export_result(user_factory("Alice"), 1, "", failures=["x"], cancelled=True)

    assert result.exit_code == EXIT_INTERRUPTED
    assert "cancelled" in result.error


def test_create_error_result():
    result = create_error_result("No users found", EXIT_NOT_FOUND, summary_extra={"query": "Zed"})

    assert result.ok is False
    assert result.exit_code == EXIT_NOT_FOUND
    assert result.rows_written == 0
    assert result.root_id == ""
    assert result.summary == {"query": "Zed"}
