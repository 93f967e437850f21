from __future__ import annotations

from typing import Optional

import requests

USER_AGENT = "OrgWalk-Client/1.0.0"
MAX_ERROR_SNIPPET = 200


def describe_http_error(response: requests.Response) -> str:
    """Extract the backend error message, falling back to a body snippet."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        err = payload["error"]
        code = err.get("code") or "error"
        message = err.get("message") or ""
        return f"{code}: {message}".strip()

    text = (response.text or "").strip()
    return text[:MAX_ERROR_SNIPPET] or (response.reason or "")


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Interpret a Retry-After header given in delta-seconds.

    Returns None when the header is absent or not a non-negative number.
    """
    if value is None:
        return None
    try:
        seconds = float(str(value).strip())
    except ValueError:
        return None
    if seconds < 0:
        return None
    return seconds
