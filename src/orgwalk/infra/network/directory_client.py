from __future__ import annotations

"""
Directory Service Client.

Issues paginated queries against the Microsoft Graph users API. Follows
continuation links transparently, retries transient failures with
exponential backoff, honors Retry-After on throttling, and maps every
failure onto the directory error taxonomy.
"""

import logging
import time
from typing import Any, Callable, Dict, Iterator, List, Optional, Set
from urllib.parse import quote

import requests

from orgwalk.domain.config import DirectoryConfig
from orgwalk.domain.directory_models import UserPage, UserRecord
from orgwalk.domain.errors import AuthError, RateLimited, TransportError
from orgwalk.infra.network.common import USER_AGENT, describe_http_error, parse_retry_after
from orgwalk.infra.network.graph_codec import SELECT_FIELDS, decode_user_page

logger = logging.getLogger(__name__)


class DirectoryClient:
    """
    Typed access to directory users and their reporting lines.

    The client holds no state between calls beyond the HTTP session; the
    continuation cursor of a listing only lives for the duration of that
    listing.
    """

    def __init__(
            self,
            config: DirectoryConfig,
            session: Optional[requests.Session] = None,
            sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._session = session if session is not None else requests.Session()
        self._sleep = sleep
        self._headers = {
            "Authorization": f"Bearer {config.access_token}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def search_users(self, query: str) -> List[UserRecord]:
        """
        Find users whose display name contains the query (case-insensitive).

        Graph $search only matches at word starts, so a fragment from the
        middle of a word ("lic" in "Alice") finds nothing there. When the
        indexed search yields no match, the whole user listing is scanned
        and filtered client-side instead. A search that returns some
        word-start matches is not widened.

        Args:
            query: Name fragment.

        Returns:
            List[UserRecord]: Every matching user across all pages.
        """
        url = f"{self._config.base_url}/users"
        params = {
            "$search": f'"displayName:{_escape_search_term(query)}"',
            "$select": SELECT_FIELDS,
            "$top": self._config.page_size,
            "$count": "true",
        }
        # Advanced queries ($search) require eventual consistency on Graph
        headers = {"ConsistencyLevel": "eventual"}

        matches = self._collect_matches(query, self.iter_pages(url, params, headers))

        if not matches:
            logger.info(f"Indexed search found no match for '{query}'; scanning all users.")
            scan_params = {"$select": SELECT_FIELDS, "$top": self._config.page_size}
            matches = self._collect_matches(query, self.iter_pages(url, scan_params))

        logger.debug(f"Search '{query}' matched {len(matches)} user(s).")
        return matches

    def list_direct_reports(self, user_id: str) -> List[UserRecord]:
        """
        List the immediate reports of a user.

        Args:
            user_id: Identifier of the manager.

        Returns:
            List[UserRecord]: Reports in backend order; empty when there are none.
        """
        url = f"{self._config.base_url}/users/{quote(user_id, safe='')}/directReports"
        params = {"$select": SELECT_FIELDS, "$top": self._config.page_size}

        reports: List[UserRecord] = []
        for page in self.iter_pages(url, params):
            reports.extend(page.users)
        return reports

    def iter_pages(
            self,
            url: str,
            params: Optional[Dict[str, Any]] = None,
            headers: Optional[Dict[str, str]] = None,
    ) -> Iterator[UserPage]:
        """
        Yield decoded pages, following continuation links until exhausted.

        Continuation links already embed the original query, so parameters
        are only sent with the first request.

        Raises:
            TransportError: If the backend hands out a link it already served.
        """
        next_url: Optional[str] = url
        next_params = params
        served: Set[str] = set()
        page_no = 0

        while next_url:
            payload = self._get_json(next_url, next_params, headers)
            page = decode_user_page(payload)
            page_no += 1
            logger.debug(f"Fetched page {page_no} ({len(page.users)} records) from {next_url}")
            yield page

            served.add(next_url)
            if page.next_link and page.next_link in served:
                raise TransportError(f"Pagination loop detected at {page.next_link}")
            next_url, next_params = page.next_link, None

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "DirectoryClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # TRANSPORT
    # -------------------------------------------------------------------------

    def _get_json(
            self,
            url: str,
            params: Optional[Dict[str, Any]],
            extra_headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Execute a GET with the retry policy and return the decoded JSON body.

        Raises:
            AuthError: On 401/403.
            RateLimited: When throttling outlasts the retry budget.
            TransportError: On network failure, non-retryable HTTP status,
                            exhausted retries or a non-JSON body.
        """
        headers = dict(self._headers)
        if extra_headers:
            headers.update(extra_headers)

        max_retries = self._config.max_retries
        attempt = 0

        while True:
            try:
                response = self._session.get(
                    url, params=params, headers=headers, timeout=self._config.timeout
                )
            except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
                if attempt >= max_retries:
                    raise TransportError(f"Network failure after {attempt + 1} attempt(s): {e}") from e
                delay = self._backoff_delay(attempt)
                logger.warning(
                    f"Network: {type(e).__name__} on {url}, retrying in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                self._sleep(delay)
                attempt += 1
                continue
            except requests.exceptions.RequestException as e:
                raise TransportError(f"Request failed: {e}") from e

            status = response.status_code

            if status in (401, 403):
                raise AuthError(f"HTTP {status}: {describe_http_error(response)}")

            if status == 429:
                retry_after = parse_retry_after(response.headers.get("Retry-After"))
                if attempt >= max_retries:
                    raise RateLimited(
                        f"Throttled by directory service after {attempt + 1} attempt(s)",
                        retry_after=retry_after,
                    )
                if retry_after is not None:
                    delay = min(retry_after, self._config.max_retry_after)
                else:
                    delay = self._backoff_delay(attempt)
                logger.warning(
                    f"Network: throttled (HTTP 429), waiting {delay:.1f}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                self._sleep(delay)
                attempt += 1
                continue

            if status >= 500:
                if attempt >= max_retries:
                    raise TransportError(
                        f"HTTP {status} after {attempt + 1} attempt(s): {describe_http_error(response)}",
                        status_code=status,
                    )
                delay = self._backoff_delay(attempt)
                logger.warning(
                    f"Network: server error (HTTP {status}), retrying in {delay:.1f}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                self._sleep(delay)
                attempt += 1
                continue

            if status >= 400:
                raise TransportError(
                    f"HTTP {status}: {describe_http_error(response)}", status_code=status
                )

            try:
                return response.json()
            except ValueError as e:
                raise TransportError("Malformed response: body is not valid JSON") from e

    @staticmethod
    def _collect_matches(query: str, pages: Iterator[UserPage]) -> List[UserRecord]:
        needle = query.casefold()
        matches: List[UserRecord] = []
        for page in pages:
            matches.extend(u for u in page.users if needle in u.display_name.casefold())
        return matches

    def _backoff_delay(self, attempt: int) -> float:
        return self._config.backoff_factor * (2 ** attempt)


def _escape_search_term(term: str) -> str:
    """Escape characters that would terminate a quoted $search clause."""
    return term.replace("\\", "\\\\").replace('"', '\\"')
