"""Interactive flows behind each CLI command.

Flow
────
search(keyword)
    client → "No results found." | save keyword → choose title
    → save selection → show_details → (bookmark | exit)

browse_history("keywords" | "selections")
    choose stored entry → search(keyword)
                        | re-query title → exact match or first result → show_details

manage_bookmarks()
    choose bookmark → confirm → delete every bookmark with that title | cancel

Each public method is a command boundary: store and client errors are
logged and reported there, and the command stops without retrying.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from booksearch.client import OpenLibraryClient, SearchClientError
from booksearch.models import SearchResult, StoredRecord
from booksearch.prompts import Prompter
from booksearch.store import (
    BOOKMARKS,
    KEYWORD_HISTORY,
    SELECTION_HISTORY,
    RecordStore,
    StoreError,
)

logger = logging.getLogger(__name__)

#: ``browse_history`` kind → (collection, prompt noun)
HISTORY_KINDS: dict[str, tuple[str, str]] = {
    "keywords": (KEYWORD_HISTORY, "keyword"),
    "selections": (SELECTION_HISTORY, "selection"),
}

NO_AUTHOR = "No Author available"
NO_YEAR = "No Publish Year Available"
BOOKMARK_ACTION = "🔖 Bookmark"

T = TypeVar("T")


def pick_replay_match(results: list[SearchResult], title: str) -> SearchResult:
    """Return the first result titled exactly *title*, else the first result.

    The fallback can silently substitute an unrelated book when the original
    is no longer returned; callers must pass a non-empty list.
    """
    return next((r for r in results if r.title == title), results[0])


def format_authors(item: SearchResult) -> str:
    return ", ".join(item.author_name) if item.author_name else NO_AUTHOR


def format_year(item: SearchResult) -> str:
    return str(item.first_publish_year) if item.first_publish_year is not None else NO_YEAR


def _command_boundary(func: Callable[..., T]) -> Callable[..., Optional[T]]:
    """Log and report store/client failures instead of propagating them."""

    @functools.wraps(func)
    def wrapper(self: "InteractionFlow", *args, **kwargs) -> Optional[T]:
        try:
            return func(self, *args, **kwargs)
        except (StoreError, SearchClientError, ValidationError) as exc:
            logger.error("%s failed: %s", func.__name__, exc)
            self.console.print(f"[red]❌ Error: {escape(str(exc))}[/red]")
            return None

    return wrapper


class InteractionFlow:
    """Orchestrates the search, history and bookmark commands.

    Args:
        store: Record store holding the history and bookmark collections.
        client: Open Library search client.
        prompter: Source of user choices; defaults to a terminal prompter.
        console: Where user-facing output goes.
    """

    def __init__(
        self,
        store: RecordStore,
        client: OpenLibraryClient,
        prompter: Optional[Prompter] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.store = store
        self.client = client
        self.console = console or Console()
        self.prompter = prompter or Prompter(self.console)

    # ── Search ─────────────────────────────────────────────────────────────

    @_command_boundary
    def search(self, keyword: str) -> Optional[SearchResult]:
        """Search, let the user pick a title, record it and show details.

        Returns:
            The selected result, or ``None`` if there were no results, the
            user exited, or the command failed.
        """
        results = self.client.search_by_keyword(keyword)
        if not results:
            self.console.print("No results found.")
            return None

        self.store.save_unique(KEYWORD_HISTORY, keyword)

        index = self.prompter.choose("Select an item", [r.title for r in results])
        if index is None:
            self.console.print("Exiting Search...")
            return None

        selected = results[index]
        self.store.save_unique(SELECTION_HISTORY, selected.title)
        self._show_details(selected)
        return selected

    def _show_details(self, item: SearchResult) -> None:
        self.console.print("\n[bold]Selected Item Details:[/bold]")
        self.console.print(f"Title: {escape(item.title)}")
        self.console.print(f"Author: {escape(format_authors(item))}")
        self.console.print(f"Publish Year: {format_year(item)}")

        action = self.prompter.choose("What would you like to do?", [BOOKMARK_ACTION])
        if action is None:
            self.console.print("Returning to main menu.")
            return
        self._save_bookmark(item)

    def _save_bookmark(self, item: SearchResult) -> bool:
        if self.store.find(BOOKMARKS, {"title": item.title}):
            self.console.print("🔖 Already bookmarked.")
            return False
        self.store.save_unique(BOOKMARKS, item.title)
        self.console.print(f"[green]✅ Bookmarked: {escape(item.title)}[/green]")
        return True

    @_command_boundary
    def show_details(self, item: SearchResult) -> None:
        """Print one result and offer to bookmark it."""
        self._show_details(item)

    @_command_boundary
    def save_bookmark(self, item: SearchResult) -> bool:
        """Bookmark *item* by title unless a bookmark with that title exists."""
        return self._save_bookmark(item)

    # ── History ────────────────────────────────────────────────────────────

    def _titles(self, collection: str) -> list[str]:
        return [StoredRecord.model_validate(r).title for r in self.store.find(collection)]

    @_command_boundary
    def browse_history(self, kind: str) -> None:
        """Let the user replay a past keyword search or selection.

        Args:
            kind: ``"keywords"`` or ``"selections"``.
        """
        if kind not in HISTORY_KINDS:
            raise ValueError(f"Unknown history kind {kind!r}; expected one of {sorted(HISTORY_KINDS)}")
        collection, noun = HISTORY_KINDS[kind]

        titles = self._titles(collection)
        if not titles:
            self.console.print(f"No {kind} history found.")

        index = self.prompter.choose(f"Select a {noun}:", titles)
        if index is None:
            self.console.print("Exiting history view.")
            return

        chosen = titles[index]
        if kind == "keywords":
            self.search(chosen)
            return

        results = self.client.search_by_keyword(chosen)
        if not results:
            self.console.print("No details found for this selection.")
            return
        self._show_details(pick_replay_match(results, chosen))

    # ── Bookmarks ──────────────────────────────────────────────────────────

    @_command_boundary
    def manage_bookmarks(self) -> None:
        """Pick a bookmark and delete it after a yes/no confirmation."""
        titles = self._titles(BOOKMARKS)
        if not titles:
            self.console.print("📂 No bookmarks saved.")
            return

        index = self.prompter.choose(
            "Select a bookmark to manage:", titles, exit_label="❌ Cancel"
        )
        if index is None:
            self.console.print("Operation canceled.")
            return

        chosen = titles[index]
        if not self.prompter.confirm(f'Are you sure you want to delete "{chosen}"?', default=False):
            self.console.print("❌ Deletion canceled.")
            return

        if not self.store.delete_one(BOOKMARKS, {"title": chosen}):
            self.console.print(f"⚠️ Bookmark already gone: {escape(chosen)}")
            return
        self.console.print(f"🗑️ Successfully deleted bookmark: {escape(chosen)}")

    @_command_boundary
    def list_bookmarks(self) -> None:
        """Print bookmark titles as a numbered list, without prompting."""
        titles = self._titles(BOOKMARKS)
        if not titles:
            self.console.print("📂 No bookmarks saved.")
            return

        self.console.print("\n[bold]📖 Your Bookmarks:[/bold]")
        for number, title in enumerate(titles, start=1):
            self.console.print(f"{number}. {escape(title)}")

    # ── Setup ──────────────────────────────────────────────────────────────

    @_command_boundary
    def init_storage(self) -> list[str]:
        """Create any missing collection file and report what was created."""
        created = self.store.init_collections()
        if created:
            self.console.print(f"Created collections: {', '.join(created)}")
        else:
            self.console.print("All collections already exist.")
        self.console.print(f"Data directory: {self.store.data_dir}")
        return created
