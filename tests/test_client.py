"""Tests for booksearch/client.py — Open Library requests with a mocked session."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from booksearch.client import OpenLibraryClient, SearchClientError
from booksearch.models import SearchResult


# ── Fixtures ───────────────────────────────────────────────────────────────────


def make_response(body=None, status_error=None, json_error=None) -> MagicMock:
    resp = MagicMock()
    if status_error:
        resp.raise_for_status.side_effect = status_error
    if json_error:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = body
    return resp


def make_client(response=None, exc=None, **kwargs) -> tuple[OpenLibraryClient, MagicMock]:
    session = MagicMock()
    if exc is not None:
        session.get.side_effect = exc
    else:
        session.get.return_value = response
    return OpenLibraryClient(session=session, **kwargs), session


DUNE_BODY = {
    "numFound": 2,
    "docs": [
        {"title": "Dune", "author_name": ["Frank Herbert"], "first_publish_year": 1965, "key": "/works/OL1W"},
        {"title": "Dune Messiah"},
    ],
}


# ── search / search_by_keyword ─────────────────────────────────────────────────


class TestSearch:
    def test_parses_docs(self):
        client, _ = make_client(make_response(DUNE_BODY))
        outcome = client.search("dune")

        assert outcome.ok is True
        assert [d.title for d in outcome.docs] == ["Dune", "Dune Messiah"]
        assert outcome.docs[0].author_name == ["Frank Herbert"]
        assert outcome.docs[1].first_publish_year is None

    def test_keeps_extra_fields(self):
        client, _ = make_client(make_response(DUNE_BODY))
        doc = client.search("dune").docs[0]
        assert doc.model_extra["key"] == "/works/OL1W"

    def test_sends_keyword_as_q_param(self):
        client, session = make_client(make_response({"docs": []}), timeout=5.0)
        client.search("the hobbit")

        args, kwargs = session.get.call_args
        assert args[0] == "https://openlibrary.org/search.json"
        assert kwargs["params"] == {"q": "the hobbit"}
        assert kwargs["timeout"] == 5.0

    def test_no_timeout_by_default(self):
        client, session = make_client(make_response({"docs": []}))
        client.search("dune")
        assert session.get.call_args.kwargs["timeout"] is None

    def test_missing_docs_is_empty_success(self):
        client, _ = make_client(make_response({}))
        outcome = client.search("dune")
        assert outcome.ok is True
        assert outcome.docs == []

    def test_network_error_returns_failed_outcome(self):
        client, _ = make_client(exc=requests.ConnectionError("boom"))
        outcome = client.search("dune")

        assert outcome.ok is False
        assert outcome.docs == []
        assert "boom" in outcome.error

    def test_http_error_returns_failed_outcome(self):
        resp = make_response(status_error=requests.HTTPError("503 Server Error"))
        client, _ = make_client(resp)
        assert client.search("dune").ok is False

    def test_bad_json_returns_failed_outcome(self):
        client, _ = make_client(make_response(json_error=ValueError("Expecting value")))
        assert client.search("dune").ok is False

    def test_non_object_body_returns_failed_outcome(self):
        client, _ = make_client(make_response(["not", "an", "object"]))
        assert client.search("dune").ok is False

    def test_malformed_doc_is_skipped(self, caplog):
        body = {"docs": [
            {"title": "Dune", "first_publish_year": "not a year"},
            {"title": "Dune Messiah", "first_publish_year": 1969},
        ]}
        client, _ = make_client(make_response(body))

        with caplog.at_level("WARNING", logger="booksearch.client"):
            outcome = client.search("dune")

        assert outcome.ok is True
        assert [d.title for d in outcome.docs] == ["Dune Messiah"]
        assert "Skipping malformed doc #0" in caplog.text

    def test_failure_is_logged(self, caplog):
        client, _ = make_client(exc=requests.Timeout("slow"))
        with caplog.at_level("ERROR", logger="booksearch.client"):
            client.search("dune")
        assert "slow" in caplog.text

    def test_search_by_keyword_returns_docs(self):
        client, _ = make_client(make_response(DUNE_BODY))
        results = client.search_by_keyword("dune")
        assert all(isinstance(r, SearchResult) for r in results)
        assert len(results) == 2

    def test_search_by_keyword_empty_on_failure(self):
        client, _ = make_client(exc=requests.ConnectionError("boom"))
        assert client.search_by_keyword("dune") == []


class TestStrictMode:
    def test_network_error_raises(self):
        client, _ = make_client(exc=requests.ConnectionError("boom"), strict=True)
        with pytest.raises(SearchClientError, match="boom"):
            client.search("dune")

    def test_malformed_doc_raises(self):
        body = {"docs": [{"title": "Dune", "first_publish_year": "not a year"}]}
        client, _ = make_client(make_response(body), strict=True)
        with pytest.raises(SearchClientError, match="Malformed"):
            client.search_by_keyword("dune")

    def test_detail_error_raises(self):
        client, _ = make_client(exc=requests.ConnectionError("boom"), strict=True)
        with pytest.raises(SearchClientError):
            client.get_detailed_data("OL1W")


# ── get_detailed_data ──────────────────────────────────────────────────────────


class TestGetDetailedData:
    def test_returns_full_body(self):
        client, session = make_client(make_response(DUNE_BODY))
        assert client.get_detailed_data("OL1W") == DUNE_BODY
        assert session.get.call_args.kwargs["params"] == {"q": "OL1W"}

    def test_uses_search_endpoint(self):
        client, session = make_client(make_response(DUNE_BODY))
        client.get_detailed_data("OL1W")
        assert session.get.call_args.args[0].endswith("/search.json")

    def test_empty_body_returns_none(self):
        client, _ = make_client(make_response({}))
        assert client.get_detailed_data("OL1W") is None

    def test_failure_returns_none(self):
        client, _ = make_client(exc=requests.ConnectionError("boom"))
        assert client.get_detailed_data("OL1W") is None


def test_session_is_lazy_and_sets_headers():
    client = OpenLibraryClient()
    assert client._session is None
    session = client.session
    assert session is client.session
    assert "book-search" in session.headers["User-Agent"]
