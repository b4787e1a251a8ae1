from __future__ import annotations

import webbrowser
from collections.abc import Callable
from typing import Any

from .cache import ResultCache
from .errors import MusicFetcherError
from .models import InitResult, ListResult, PlayResult, SaveResult, SearchResult, Track
from .spotify_client import search_catalog
from .store import TrackStore


def _error(exc: MusicFetcherError) -> dict[str, str]:
    return {"code": exc.code, "message": exc.message}


def search(
    query: str,
    cache: ResultCache,
    settings: dict[str, Any],
    item_type: str = "track",
    genre: str | None = None,
    limit: int = 10,
) -> SearchResult:
    out = SearchResult(query=query, item_type=item_type, genre=genre, limit=limit)
    try:
        items = search_catalog(query, settings, item_type=item_type, genre=genre, limit=limit)
    except MusicFetcherError as exc:
        out.errors.append(_error(exc))
        return out

    # Written even when empty so `save` never picks from an older search.
    out.cache_written = cache.save(items)
    out.items = [Track.from_item(item) for item in items]
    out.status = "found" if out.items else "empty"
    return out


def save(index: int, cache: ResultCache, store: TrackStore) -> SaveResult:
    out = SaveResult(index=index)
    last_fetched = cache.load()
    if not last_fetched:
        out.status = "empty_cache"
        return out
    if index < 1 or index > len(last_fetched):
        out.status = "not_found"
        return out

    track = Track.from_item(last_fetched[index - 1])
    out.track = track
    if not track.url:
        out.errors.append({"code": "TRACK_MISSING_URL", "message": f'Track "{track.title}" has no external URL'})
        return out

    try:
        out.status, out.item_id = store.save_track(track)
    except MusicFetcherError as exc:
        out.errors.append(_error(exc))
    return out


def list_saved(store: TrackStore, genre: str | None = None) -> ListResult:
    out = ListResult(genre=genre)
    try:
        out.items = store.list_saved(genre)
    except MusicFetcherError as exc:
        out.errors.append(_error(exc))
        return out
    out.status = "found" if out.items else "empty"
    return out


def play(
    item_id: int,
    store: TrackStore,
    opener: Callable[[str], bool] | None = None,
) -> PlayResult:
    out = PlayResult(item_id=item_id)
    opener = opener or webbrowser.open
    try:
        url = store.get_url(item_id)
    except MusicFetcherError as exc:
        out.errors.append(_error(exc))
        return out
    if url is None:
        out.status = "not_found"
        return out

    out.url = url
    try:
        opened = opener(url)
    except (webbrowser.Error, OSError):
        opened = False
    out.status = "opened" if opened else "manual"
    return out


def init_db(store: TrackStore) -> InitResult:
    out = InitResult()
    try:
        store.create_schema()
    except MusicFetcherError as exc:
        out.errors.append(_error(exc))
        return out
    out.status = "created"
    return out
