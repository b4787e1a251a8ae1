from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError


def load_settings(path: str | None = None) -> dict[str, Any]:
    config_path = Path(path or os.getenv("MUSIC_FETCHER_SETTINGS_PATH", "config/settings.yaml"))
    if not config_path.exists():
        return {}
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError("CONFIG_INVALID_SETTINGS", f"Cannot read settings file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError("CONFIG_INVALID_SETTINGS", f"Settings file {config_path} must contain a mapping")
    return data


def spotify_credentials(settings: dict[str, Any]) -> tuple[str, str]:
    cfg = settings.get("spotify") or {}
    client_id_env = str(cfg.get("client_id_env", "SPOTIFY_CLIENT_ID"))
    client_secret_env = str(cfg.get("client_secret_env", "SPOTIFY_CLIENT_SECRET"))
    client_id, client_secret = os.getenv(client_id_env), os.getenv(client_secret_env)
    if not client_id or not client_secret:
        raise ConfigurationError(
            "CONFIG_MISSING_CREDENTIALS",
            f"Spotify Client ID or Secret not set ({client_id_env}, {client_secret_env})",
        )
    return client_id, client_secret


def request_timeout(settings: dict[str, Any]) -> int:
    return int((settings.get("spotify") or {}).get("request_timeout_sec", 10))


def cache_config(settings: dict[str, Any]) -> str:
    cache = settings.get("cache") or {}
    return str(cache.get("last_results_path", "./cache/last-fetched-tracks.json"))


def database_config(settings: dict[str, Any]) -> dict[str, str]:
    """Connection parameters for the saved-items store.

    A full ``url`` under ``database:`` wins; otherwise each part comes from the
    settings file, then the ``MYSQL_*`` environment, then a local default.
    """
    cfg = settings.get("database") or {}
    if cfg.get("url"):
        return {"url": str(cfg["url"])}
    return {
        "host": str(cfg.get("host") or os.getenv("MYSQL_HOST") or "localhost"),
        "user": str(cfg.get("user") or os.getenv("MYSQL_USER") or "root"),
        "password": str(cfg.get("password") or os.getenv("MYSQL_PASSWORD") or "root"),
        "database": str(cfg.get("name") or os.getenv("MYSQL_DATABASE") or "music_fetcher"),
    }


def log_level(settings: dict[str, Any]) -> str:
    return str((settings.get("logging") or {}).get("level", "WARNING")).upper()
