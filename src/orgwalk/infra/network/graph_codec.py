from __future__ import annotations

"""
Graph Response Decoding.

Maps the loosely shaped JSON returned by the directory service onto the
strict UserRecord / UserPage pair. Any structural surprise is reported as
a TransportError so untyped data never travels past the client.
"""

import logging
from typing import Any, Dict, List, Optional

from orgwalk.domain.directory_models import UserPage, UserRecord
from orgwalk.domain.errors import TransportError

logger = logging.getLogger(__name__)

USER_ODATA_TYPE = "#microsoft.graph.user"
NEXT_LINK_KEY = "@odata.nextLink"

# JSON property -> UserRecord attribute, for optional string metadata
_OPTIONAL_FIELDS: Dict[str, str] = {
    "mail": "mail",
    "jobTitle": "job_title",
    "department": "department",
    "officeLocation": "office_location",
    "userPrincipalName": "user_principal_name",
}

SELECT_FIELDS = ",".join(["id", "displayName", *_OPTIONAL_FIELDS.keys()])


def decode_user(item: Any) -> Optional[UserRecord]:
    """
    Decode a single directory object.

    Returns None for objects that are not users (e.g. org contacts listed as
    direct reports).

    Raises:
        TransportError: If the object is malformed.
    """
    if not isinstance(item, dict):
        raise TransportError(f"Malformed response: expected object, received {type(item).__name__}")

    odata_type = item.get("@odata.type")
    if odata_type is not None and odata_type != USER_ODATA_TYPE:
        logger.debug(f"Skipping non-user directory object of type {odata_type}")
        return None

    user_id = item.get("id")
    if not isinstance(user_id, str) or not user_id:
        raise TransportError("Malformed response: user without a string 'id'")

    display_name = item.get("displayName")
    if not isinstance(display_name, str):
        raise TransportError(f"Malformed response: user {user_id} has no string 'displayName'")

    metadata: Dict[str, Optional[str]] = {}
    for json_key, attr in _OPTIONAL_FIELDS.items():
        value = item.get(json_key)
        if value is not None and not isinstance(value, str):
            raise TransportError(
                f"Malformed response: user {user_id} field '{json_key}' is {type(value).__name__}"
            )
        metadata[attr] = value

    return UserRecord(id=user_id, display_name=display_name, **metadata)


def decode_user_page(payload: Any) -> UserPage:
    """
    Decode one page of a listing response.

    Raises:
        TransportError: If the payload lacks a 'value' array or carries an
                        invalid continuation link.
    """
    if not isinstance(payload, dict):
        raise TransportError("Malformed response: root is not a JSON object")

    items = payload.get("value")
    if not isinstance(items, list):
        raise TransportError("Malformed response: missing 'value' array")

    users: List[UserRecord] = []
    for item in items:
        user = decode_user(item)
        if user is not None:
            users.append(user)

    next_link = payload.get(NEXT_LINK_KEY)
    if next_link is not None and (not isinstance(next_link, str) or not next_link):
        raise TransportError("Malformed response: invalid continuation link")

    return UserPage(users=users, next_link=next_link)
