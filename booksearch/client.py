"""Open Library search client.

Both operations hit the same ``search.json`` endpoint: a "detail" lookup is
a second keyword search with the id used as the query string, so it is not
guaranteed to return one authoritative record.

By default failures are logged and surfaced as an empty result (or
``None``); with ``strict=True`` they raise ``SearchClientError`` instead.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests
from pydantic import ValidationError

from booksearch.models import SearchOutcome, SearchResult

logger = logging.getLogger(__name__)

#: Sent with every request; Open Library asks clients to identify themselves.
USER_AGENT = "book-search-cli/0.1 (+https://openlibrary.org/dev/docs/api/search)"


class SearchClientError(RuntimeError):
    """A search request failed or its body could not be parsed."""


class OpenLibraryClient:
    """Thin wrapper around ``GET <search_url>?q=<term>``.

    No retries, pagination or backoff. ``timeout=None`` waits for the
    remote end indefinitely.
    """

    def __init__(
        self,
        search_url: str = "https://openlibrary.org/search.json",
        timeout: Optional[float] = None,
        strict: bool = False,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.search_url = search_url
        self.timeout = timeout
        self.strict = strict
        self._session = session

    @property
    def session(self) -> requests.Session:
        """Lazy-initialise and return the HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(
                {"User-Agent": USER_AGENT, "Accept": "application/json"}
            )
        return self._session

    def _get_json(self, term: str) -> Any:
        """GET the search endpoint for *term* and return the decoded body.

        Raises:
            SearchClientError: On any transport, HTTP status or JSON error.
        """
        try:
            resp = self.session.get(
                self.search_url, params={"q": term}, timeout=self.timeout
            )
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise SearchClientError(f"Request for {term!r} failed: {exc}") from exc

    def search(self, keyword: str) -> SearchOutcome:
        """Search the catalogue and report success or failure explicitly.

        Docs that do not fit ``SearchResult`` are skipped with a warning;
        the rest of the page is still returned.

        Args:
            keyword: Free-text query passed as the ``q`` parameter.

        Returns:
            A ``SearchOutcome``; ``ok`` is False when the request or parse
            failed (non-strict mode only).

        Raises:
            SearchClientError: In strict mode, on any failure, including a
                malformed doc.
        """
        logger.info("Fetching data for: %s", keyword)
        try:
            body = self._get_json(keyword)
            if not isinstance(body, dict):
                raise SearchClientError(
                    f"Unexpected response body for {keyword!r}: {type(body).__name__}"
                )
        except SearchClientError as exc:
            if self.strict:
                raise
            logger.error("Error fetching data for %r: %s", keyword, exc)
            return SearchOutcome(ok=False, error=str(exc))

        docs: list[SearchResult] = []
        for position, doc in enumerate(body.get("docs") or []):
            try:
                docs.append(SearchResult.model_validate(doc))
            except ValidationError as exc:
                if self.strict:
                    raise SearchClientError(f"Malformed docs for {keyword!r}: {exc}") from exc
                logger.warning("Skipping malformed doc #%d for %r: %s", position, keyword, exc)

        logger.info("Search %r returned %d docs", keyword, len(docs))
        return SearchOutcome(ok=True, docs=docs)

    def search_by_keyword(self, keyword: str) -> list[SearchResult]:
        """Return the ``docs`` for *keyword*, or ``[]`` on failure."""
        return self.search(keyword).docs

    def get_detailed_data(self, item_id: str) -> Optional[dict[str, Any]]:
        """Query the search endpoint with *item_id* and return the whole body.

        Returns:
            The parsed JSON body, or ``None`` if it is empty or the request
            failed (non-strict mode).
        """
        logger.info("Fetching detailed data for ID: %s", item_id)
        try:
            body = self._get_json(item_id)
        except SearchClientError as exc:
            if self.strict:
                raise
            logger.error("Error fetching detailed data for %r: %s", item_id, exc)
            return None

        if not body:
            logger.info("No details found for ID: %s", item_id)
            return None
        return body
