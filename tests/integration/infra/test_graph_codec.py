from __future__ import annotations

"""
Tests for the Graph response codec and HTTP helpers.
"""

from unittest.mock import MagicMock

import pytest

from orgwalk.domain.errors import TransportError
from orgwalk.infra.network import decode_user, decode_user_page, parse_retry_after
from orgwalk.infra.network.common import describe_http_error


def test_decode_user_without_type_annotation():
    """TC-01: Search results omit @odata.type and still decode as users."""
    user = decode_user({"id": "1", "displayName": "Alice", "mail": None})

    assert user is not None
    assert user.id == "1"
    assert user.mail is None


def test_decode_user_skips_groups_and_contacts():
    assert decode_user({"@odata.type": "#microsoft.graph.group", "id": "g"}) is None


@pytest.mark.parametrize("item", [None, "alice", {"id": "", "displayName": "A"}, {"id": "1", "displayName": 3}])
def test_decode_user_rejects_malformed(item):
    with pytest.raises(TransportError):
        decode_user(item)


def test_decode_user_page_reads_next_link():
    page = decode_user_page({
        "value": [{"id": "1", "displayName": "A"}],
        "@odata.nextLink": "https://graph.test/next",
    })

    assert page.next_link == "https://graph.test/next"
    assert len(page.users) == 1


def test_decode_user_page_empty_is_terminal():
    page = decode_user_page({"value": []})

    assert page.users == []
    assert page.next_link is None


@pytest.mark.parametrize(
    "value, expected",
    [("5", 5.0), (" 1.5 ", 1.5), ("0", 0.0), (None, None), ("-2", None),
     ("Wed, 21 Oct 2015 07:28:00 GMT", None)],
)
def test_parse_retry_after(value, expected):
    assert parse_retry_after(value) == expected


def test_describe_http_error_prefers_graph_payload():
    response = MagicMock()
    response.json.return_value = {"error": {"code": "Authorization_RequestDenied", "message": "Denied."}}

    assert describe_http_error(response) == "Authorization_RequestDenied: Denied."


def test_describe_http_error_falls_back_to_text():
    response = MagicMock()
    response.json.side_effect = ValueError("no json")
    response.text = "x" * 500
    response.reason = "Bad Gateway"

    assert describe_http_error(response) == "x" * 200

    response.text = ""
    assert describe_http_error(response) == "Bad Gateway"
