from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Literal

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    func,
    insert,
    select,
    text,
)
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from .errors import StoreError
from .models import SavedItem, Track
from .settings import database_config

metadata = MetaData()

music_items = Table(
    "music_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("artist", String(255)),
    Column("album", String(255)),
    Column("genre", String(100)),
    Column("spotify_url", String(255), nullable=False, unique=True),
    Column("saved_at", DateTime, server_default=text("CURRENT_TIMESTAMP")),
)


def database_url(settings: dict[str, Any]) -> str | URL:
    cfg = database_config(settings)
    if "url" in cfg:
        return cfg["url"]
    return URL.create(
        "mysql+pymysql",
        username=cfg["user"],
        password=cfg["password"],
        host=cfg["host"],
        database=cfg["database"],
    )


class TrackStore:
    def __init__(self, url: str | URL):
        # One connection per operation; nothing is pooled.
        self.engine: Engine = create_engine(url, poolclass=NullPool)

    @classmethod
    def from_settings(cls, settings: dict[str, Any]) -> TrackStore:
        return cls(database_url(settings))

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        try:
            conn = self.engine.connect()
        except SQLAlchemyError as exc:
            raise StoreError("STORE_CONNECT_FAILED", f"Error connecting to database: {exc}") from exc
        try:
            yield conn
        except SQLAlchemyError as exc:
            raise StoreError("STORE_QUERY_FAILED", f"Database query failed: {exc}") from exc
        finally:
            conn.close()

    def create_schema(self) -> None:
        with self.connection() as conn:
            metadata.create_all(conn, checkfirst=True)
            conn.commit()

    def save_track(self, track: Track) -> tuple[Literal["saved", "duplicate"], int]:
        with self.connection() as conn:
            existing = conn.execute(
                select(music_items.c.id).where(music_items.c.spotify_url == track.url)
            ).first()
            if existing is not None:
                return "duplicate", int(existing.id)

            result = conn.execute(
                insert(music_items).values(
                    title=track.title,
                    artist=track.artist,
                    album=track.album,
                    genre=track.primary_genre,
                    spotify_url=track.url,
                )
            )
            conn.commit()
            return "saved", int(result.inserted_primary_key[0])

    def list_saved(self, genre: str | None = None) -> list[SavedItem]:
        stmt = select(music_items)
        if genre:
            stmt = stmt.where(func.lower(music_items.c.genre).like(f"%{genre.lower()}%"))
        with self.connection() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [SavedItem.model_validate(dict(row)) for row in rows]

    def get_url(self, item_id: int) -> str | None:
        with self.connection() as conn:
            row = conn.execute(
                select(music_items.c.spotify_url).where(music_items.c.id == item_id)
            ).first()
        return row.spotify_url if row else None
