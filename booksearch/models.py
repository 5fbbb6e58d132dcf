"""
Pydantic models shared across the book search package.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SearchResult(BaseModel):
    """A single book document returned by the Open Library search API.

    Only the fields the CLI displays are declared; anything else the API
    returns (``key``, ``cover_i``, ...) is kept as an extra attribute.
    """

    model_config = ConfigDict(extra="allow")

    title: str = ""
    author_name: Optional[list[str]] = None
    first_publish_year: Optional[int] = None


class StoredRecord(BaseModel):
    """A persisted ``{title, _id}`` record from one of the JSON collections."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    id: str = Field(alias="_id")


class SearchOutcome(BaseModel):
    """Result of one search request.

    ``ok`` is False when the request or body parsing failed, which lets
    callers tell "no results" apart from "request failed".
    """

    ok: bool
    docs: list[SearchResult] = Field(default_factory=list)
    error: Optional[str] = None
