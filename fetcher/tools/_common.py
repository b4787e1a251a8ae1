from __future__ import annotations

import json
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from fetcher.core import ResultCache, TrackStore
from fetcher.core.settings import cache_config

console = Console()
err_console = Console(stderr=True)


def get_cache(settings: dict[str, Any]) -> ResultCache:
    return ResultCache(cache_config(settings))


def get_store(settings: dict[str, Any]) -> TrackStore:
    return TrackStore.from_settings(settings)


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.WARNING)
    handler = RichHandler(console=err_console, rich_tracebacks=False, markup=False)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


def say(message: str, style: str | None = None, err: bool = False) -> None:
    (err_console if err else console).print(message, style=style, markup=False, highlight=False, soft_wrap=True)


def print_json(data: Any) -> None:
    if hasattr(data, "model_dump_json"):
        print(data.model_dump_json(indent=2))
        return
    print(json.dumps(data, indent=2))
