#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
from typing import Any

from dotenv import load_dotenv
from rich.markup import escape
from rich.table import Table

from fetcher.core import commands
from fetcher.core.errors import MusicFetcherError
from fetcher.core.models import InitResult, ListResult, PlayResult, SaveResult, SearchResult
from fetcher.core.settings import load_settings, log_level
from fetcher.core.spotify_client import ITEM_TYPES
from fetcher.tools._common import configure_logging, console, get_cache, get_store, print_json, say

logger = logging.getLogger(__name__)

MAX_LIMIT = 50


def _limit(value: str) -> int:
    try:
        limit = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid limit: {value!r}") from None
    if not 1 <= limit <= MAX_LIMIT:
        raise argparse.ArgumentTypeError(f"limit must be between 1 and {MAX_LIMIT}")
    return limit


def _report_errors(action: str, errors: list[dict[str, str]]) -> None:
    for error in errors:
        say(f"Error {action}: {error['message']}", style="red", err=True)


def _run_search(args: argparse.Namespace, settings: dict[str, Any]) -> SearchResult:
    return commands.search(
        args.query,
        get_cache(settings),
        settings,
        item_type=args.type,
        genre=args.genre,
        limit=args.limit,
    )


def _render_search(result: SearchResult) -> None:
    if result.errors:
        _report_errors("searching music", result.errors)
        return
    if result.status == "empty":
        say("No tracks found.", style="yellow")
        return

    table = Table()
    for column in ("Index", "Track", "Artist", "Album"):
        table.add_column(column)
    table.add_column("URL", overflow="fold")
    for index, track in enumerate(result.items, start=1):
        values = (track.title, track.artist, track.album, track.url)
        table.add_row(str(index), *(escape(value or "") for value in values))
    console.print(table)


def _run_save(args: argparse.Namespace, settings: dict[str, Any]) -> SaveResult:
    return commands.save(args.index, get_cache(settings), get_store(settings))


def _render_save(result: SaveResult) -> None:
    if result.errors:
        _report_errors("saving track", result.errors)
    elif result.status == "empty_cache":
        say("No tracks available to save. Run a search command first.", style="red", err=True)
    elif result.status == "not_found":
        say(f"Track at index {result.index} not found.", style="red", err=True)
    elif result.status == "duplicate" and result.track:
        say(f'Track "{result.track.title}" is already saved.', style="yellow")
    elif result.track:
        say(f"Track saved: {result.track.title}", style="green")


def _run_list(args: argparse.Namespace, settings: dict[str, Any]) -> ListResult:
    return commands.list_saved(get_store(settings), genre=args.genre)


def _render_list(result: ListResult) -> None:
    if result.errors:
        _report_errors("listing tracks", result.errors)
        return
    if result.status == "empty":
        say("No saved tracks found.", style="yellow")
        return

    table = Table(title="Saved Tracks")
    for column in ("ID", "Track", "Artist", "Album", "Genre"):
        table.add_column(column)
    table.add_column("URL", overflow="fold")
    table.add_column("Saved")
    for item in result.items:
        values = (item.title, item.artist, item.album, item.genre, item.spotify_url)
        table.add_row(str(item.id), *(escape(value or "") for value in values), str(item.saved_at or ""))
    console.print(table)


def _run_play(args: argparse.Namespace, settings: dict[str, Any]) -> PlayResult:
    return commands.play(args.id, get_store(settings))


def _render_play(result: PlayResult) -> None:
    if result.errors:
        _report_errors("opening track", result.errors)
        return
    if result.status == "not_found":
        say(f"Track with ID {result.item_id} not found.", style="red", err=True)
        return

    say(f"Track URL: {result.url}", style="green")
    if result.status == "opened":
        say("Opening track in Spotify...", style="green")
    else:
        say(f"Could not open browser. Please visit: {result.url}", style="yellow")


def _run_init(args: argparse.Namespace, settings: dict[str, Any]) -> InitResult:
    return commands.init_db(get_store(settings))


def _render_init(result: InitResult) -> None:
    if result.errors:
        _report_errors("creating table", result.errors)
        return
    say("Table music_items is ready.", style="green")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="music-fetcher",
        description="Search Spotify, cache the last results and keep a table of saved tracks",
    )
    parser.add_argument("--settings", default=None, help="Path to a YAML settings file")
    parser.add_argument("--json", action="store_true", help="Print the command result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search for music tracks")
    search.add_argument("query", help="Search query (e.g. artist, track name)")
    search.add_argument("--type", default="track", choices=ITEM_TYPES, help="Type to search")
    search.add_argument("--genre", default=None, help="Genre to filter by (e.g. pop, rock)")
    search.add_argument("--limit", default=10, type=_limit, help="Number of results to return")
    search.set_defaults(run=_run_search, render=_render_search, action="searching music")

    save = sub.add_parser("save", help="Save a track from the last search to the database")
    save.add_argument("index", type=int, help="Index of the track in the last search")
    save.set_defaults(run=_run_save, render=_render_save, action="saving track")

    list_saved = sub.add_parser("list-saved", help="List all saved tracks")
    list_saved.add_argument("--genre", default=None, help="Filter by genre")
    list_saved.set_defaults(run=_run_list, render=_render_list, action="listing tracks")

    play = sub.add_parser("play", help="Open a saved track in Spotify")
    play.add_argument("id", type=int, help="Track ID")
    play.set_defaults(run=_run_play, render=_render_play, action="opening track")

    init = sub.add_parser("init-db", help="Create the saved tracks table if it does not exist")
    init.set_defaults(run=_run_init, render=_render_init, action="creating table")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    try:
        load_dotenv()
        settings = load_settings(args.settings)
    except MusicFetcherError as exc:
        say(f"Error loading settings: {exc.message}", style="red", err=True)
        return
    configure_logging("DEBUG" if args.verbose else log_level(settings))

    try:
        result = args.run(args, settings)
    except Exception as exc:
        logger.exception("Unexpected failure in %s", args.command)
        say(f"Error {args.action}: {exc}", style="red", err=True)
        return

    if args.json:
        print_json(result)
        return
    args.render(result)


if __name__ == "__main__":
    main()
