from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class Track(BaseModel):
    title: str
    artist: str | None = None
    album: str | None = None
    genres: list[str] = Field(default_factory=list)
    url: str | None = None

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> Track:
        artists = [a.get("name") for a in item.get("artists") or [] if isinstance(a, dict) and a.get("name")]
        album = item.get("album")
        genres = item.get("genres")
        return cls(
            title=str(item.get("name") or ""),
            artist=artists[0] if artists else None,
            album=album.get("name") if isinstance(album, dict) else None,
            genres=[str(g) for g in genres] if isinstance(genres, list) else [],
            url=(item.get("external_urls") or {}).get("spotify"),
        )

    @property
    def primary_genre(self) -> str:
        return self.genres[0] if self.genres else "unknown"


class SavedItem(BaseModel):
    id: int
    title: str
    artist: str | None = None
    album: str | None = None
    genre: str | None = None
    spotify_url: str
    saved_at: datetime | None = None


class SearchResult(BaseModel):
    query: str
    item_type: str = "track"
    genre: str | None = None
    limit: int = 10
    status: Literal["found", "empty", "failed"] = "failed"
    items: list[Track] = Field(default_factory=list)
    cache_written: bool = False
    errors: list[dict[str, str]] = Field(default_factory=list)


class SaveResult(BaseModel):
    index: int
    status: Literal["saved", "duplicate", "not_found", "empty_cache", "failed"] = "failed"
    track: Track | None = None
    item_id: int | None = None
    errors: list[dict[str, str]] = Field(default_factory=list)


class ListResult(BaseModel):
    genre: str | None = None
    status: Literal["found", "empty", "failed"] = "failed"
    items: list[SavedItem] = Field(default_factory=list)
    errors: list[dict[str, str]] = Field(default_factory=list)


class PlayResult(BaseModel):
    item_id: int
    status: Literal["opened", "manual", "not_found", "failed"] = "failed"
    url: str | None = None
    errors: list[dict[str, str]] = Field(default_factory=list)


class InitResult(BaseModel):
    status: Literal["created", "failed"] = "failed"
    errors: list[dict[str, str]] = Field(default_factory=list)
