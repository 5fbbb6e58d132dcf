"""
JSON flat-file record store for book-search.

Layout
──────
<data_dir>/
  search_history_keyword.json    [{"title": ..., "_id": ...}, ...]
  search_history_selection.json
  bookmarks.json

Every operation loads the whole collection, scans it linearly and, for
writes, rewrites the whole file. There is no locking: two processes
writing the same collection can lose one side's update.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
import uuid
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

KEYWORD_HISTORY = "search_history_keyword"
SELECTION_HISTORY = "search_history_selection"
BOOKMARKS = "bookmarks"

#: Every collection the CLI reads or writes.
COLLECTIONS: tuple[str, ...] = (KEYWORD_HISTORY, SELECTION_HISTORY, BOOKMARKS)

Record = dict[str, Any]


class StoreError(RuntimeError):
    """A collection file is missing, unreadable or not a JSON array."""


def generate_id() -> str:
    """Return a ``<unix-ms>-<random hex>`` record identifier."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex}"


def _single_pair(query: Record) -> tuple[str, Any]:
    """Unpack a one-field equality query into ``(key, value)``."""
    if len(query) != 1:
        raise ValueError(f"query must have exactly one field, got {len(query)}")
    return next(iter(query.items()))


def _matches(record: Record, key: str, value: Any) -> bool:
    """Strict equality: the field must exist and have the query value's type.

    ``True == 1`` in Python, so the type check keeps JSON booleans and
    numbers apart.
    """
    if key not in record:
        return False
    field = record[key]
    return type(field) is type(value) and field == value


class RecordStore:
    """Whole-collection CRUD over ``<collection>.json`` files in *data_dir*.

    Collections are never created implicitly: reading or writing a
    collection whose file does not exist raises ``StoreError``. Use
    ``init_collections()`` to create them.
    """

    def __init__(self, data_dir: Path | str) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    # ── Low-level file access ──────────────────────────────────────────────

    def read(self, collection: str) -> list[Record]:
        """Load and parse the full collection.

        Raises:
            StoreError: If the file is missing, unreadable, not valid JSON,
                or does not hold a top-level array.
        """
        path = self.path_for(collection)
        try:
            with path.open("r", encoding="utf-8") as fh:
                records = json.load(fh)
        except (OSError, ValueError) as exc:
            raise StoreError(
                f"Error reading data from collection {collection}: {exc}"
            ) from exc

        if not isinstance(records, list):
            raise StoreError(
                f"Error reading data from collection {collection}: "
                f"expected a JSON array, got {type(records).__name__}"
            )
        return records

    def _write(self, collection: str, records: list[Record]) -> None:
        """Replace the collection file with *records*.

        The new content is written to a temp file next to the target and
        moved into place, so a crash mid-write leaves the old file intact.
        """
        path = self.path_for(collection)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{collection}.", suffix=".tmp", dir=str(self.data_dir)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # ── Public operations ──────────────────────────────────────────────────

    def insert(self, collection: str, data: Record) -> Record:
        """Append *data* with a freshly generated ``_id`` to *collection*.

        Args:
            collection: Collection name (file stem).
            data: Fields of the new record. An ``_id`` key in *data* is
                overwritten.

        Returns:
            The stored record including its ``_id``.
        """
        record = {**data, "_id": generate_id()}
        try:
            records = self.read(collection)
            records.append(record)
            self._write(collection, records)
        except (OSError, StoreError) as exc:
            raise StoreError(
                f"Error inserting record in collection {collection}: {exc}"
            ) from exc

        logger.debug("Inserted _id=%s into %s", record["_id"], collection)
        return record

    def find(self, collection: str, query: Optional[Record] = None) -> list[Record]:
        """Return all records, or those whose field strictly equals the query value.

        Args:
            collection: Collection name.
            query: ``None`` for every record, or a single-field mapping
                ``{key: value}``. Matching is exact; there is no prefix or
                case-insensitive match.

        Returns:
            A (possibly empty) list of matching records.
        """
        try:
            records = self.read(collection)
            if not query:
                return records
            key, value = _single_pair(query)
        except (StoreError, ValueError) as exc:
            raise StoreError(
                f"Error finding record in collection {collection}: {exc}"
            ) from exc

        return [r for r in records if _matches(r, key, value)]

    def save_unique(self, collection: str, title: str) -> bool:
        """Insert ``{"title": title}`` unless a record with that title exists.

        De-duplication happens here rather than in storage, so concurrent
        callers can still both insert.

        Returns:
            True if a record was inserted, False if the title was present.
        """
        try:
            records = self.read(collection)
            if any(r.get("title") == title for r in records):
                return False
            self.insert(collection, {"title": title})
        except StoreError as exc:
            raise StoreError(
                f"Error saving unique data in collection {collection}: {exc}"
            ) from exc

        logger.info("Saved unique %s: %s", collection, title)
        return True

    def delete_one(self, collection: str, query: Record) -> int:
        """Remove every record matching a single-field equality query.

        Despite the name, all matches are removed. When nothing matches the
        file is left untouched.

        Returns:
            The number of records removed.
        """
        try:
            records = self.read(collection)
            key, value = _single_pair(query)
            kept = [r for r in records if not _matches(r, key, value)]
            removed = len(records) - len(kept)
            if not removed:
                logger.warning("No record found for deletion in %s (%s=%r)", collection, key, value)
                return 0
            self._write(collection, kept)
        except (OSError, StoreError, ValueError) as exc:
            raise StoreError(
                f"Error deleting record in {collection}: {exc}"
            ) from exc

        logger.info("Deleted %d record(s) with %s=%r from %s", removed, key, value, collection)
        return removed

    def init_collections(self, names: tuple[str, ...] = COLLECTIONS) -> list[str]:
        """Create the data directory and any missing collection as ``[]``.

        Existing files are left as they are.

        Returns:
            Names of the collections that were created.
        """
        created: list[str] = []
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            for name in names:
                if self.path_for(name).exists():
                    continue
                self._write(name, [])
                created.append(name)
        except OSError as exc:
            raise StoreError(f"Error initialising collections in {self.data_dir}: {exc}") from exc

        if created:
            logger.info("Initialised collections %s in %s", ", ".join(created), self.data_dir)
        return created
