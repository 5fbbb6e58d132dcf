"""
Command dispatcher for book-search.

Commands
────────
search <keyword>      Search Open Library and pick a result
history keywords      Replay a past keyword search
history selections    Re-open a previously selected book
bookmarks [--list]    Manage (or just list) saved bookmarks
init                  Create the JSON collection files
--help                Show this help

Each invocation runs exactly one command and exits.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console

from booksearch.client import OpenLibraryClient
from booksearch.flow import HISTORY_KINDS, InteractionFlow
from booksearch.store import RecordStore
from config.settings import Settings

logger = logging.getLogger(__name__)

PROG = "book-search"
INVALID_COMMAND = f"Invalid command. Run '{PROG} --help' for usage."

Command = Callable[[InteractionFlow], object]

_COMMANDS_HELP = """\
commands:
  search <keyword>      Search for a keyword using the Open Library API
  history keywords      Show past searched keywords
  history selections    Show past selected search results
  bookmarks             View and delete saved bookmarks (--list to only print them)
  init                  Create missing history/bookmark collection files
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        usage=f"{PROG} <command> [options]",
        description="Search Open Library from the terminal, keep history and bookmarks.",
        epilog=_COMMANDS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("command", nargs="?", help=argparse.SUPPRESS)
    parser.add_argument("args", nargs="*", help=argparse.SUPPRESS)
    parser.add_argument(
        "--list",
        action="store_true",
        help="with 'bookmarks': print bookmarks without prompting",
    )
    return parser


def resolve_command(
    command: Optional[str], args: Sequence[str], list_only: bool = False
) -> Optional[Command]:
    """Map parsed positionals to a flow call, or ``None`` if they are invalid."""
    if command == "search" and not list_only:
        keyword = " ".join(args).strip()
        if not keyword:
            return None
        return lambda flow: flow.search(keyword)

    if command == "history" and len(args) == 1 and args[0] in HISTORY_KINDS and not list_only:
        kind = args[0]
        return lambda flow: flow.browse_history(kind)

    if command == "bookmarks" and not args:
        if list_only:
            return lambda flow: flow.list_bookmarks()
        return lambda flow: flow.manage_bookmarks()

    if command == "init" and not args and not list_only:
        return lambda flow: flow.init_storage()

    return None


def build_flow(settings: Settings, console: Optional[Console] = None) -> InteractionFlow:
    """Wire the store, client and prompter from *settings*."""
    store = RecordStore(settings.data_dir)
    client = OpenLibraryClient(
        search_url=settings.search_url,
        timeout=settings.request_timeout,
        strict=settings.strict_search,
    )
    return InteractionFlow(store, client, console=console)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse *argv*, run one command and return the process exit code."""
    load_dotenv()

    parser = build_parser()
    ns, unknown = parser.parse_known_args(argv)

    if ns.command is None and not ns.args and not ns.list and not unknown:
        parser.print_help()
        return 0

    run = None if unknown else resolve_command(ns.command, ns.args, ns.list)
    if run is None:
        print(INVALID_COMMAND, file=sys.stderr)
        return 2

    try:
        settings = Settings()
        settings.validate()
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Running %r with data_dir=%s", ns.command, settings.data_dir)

    try:
        run(build_flow(settings))
    except (EOFError, KeyboardInterrupt):
        print(file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
