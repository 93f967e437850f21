from __future__ import annotations

"""
Network Communication Infrastructure.

Orchestrates external HTTP interactions with the directory service.
"""

from orgwalk.infra.network.common import USER_AGENT, parse_retry_after
from orgwalk.infra.network.directory_client import DirectoryClient
from orgwalk.infra.network.graph_codec import decode_user, decode_user_page

__all__ = [
    "DirectoryClient",
    "decode_user",
    "decode_user_page",
    "parse_retry_after",
    "USER_AGENT",
]
