from __future__ import annotations

import logging
from typing import Any

import requests

from .errors import AuthenticationError, CatalogError
from .settings import request_timeout, spotify_credentials

logger = logging.getLogger(__name__)

TOKEN_URL = "https://accounts.spotify.com/api/token"
SEARCH_URL = "https://api.spotify.com/v1/search"
ITEM_TYPES = ("track", "album", "artist")


def _upstream_message(resp: requests.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text.strip()
    if not isinstance(payload, dict):
        return ""
    error = payload.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or "")
    return str(payload.get("error_description") or error or "")


def _json_object(resp: requests.Response) -> dict[str, Any] | None:
    try:
        payload = resp.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def get_app_token(settings: dict[str, Any]) -> str:
    client_id, client_secret = spotify_credentials(settings)

    logger.debug("Requesting client-credentials token")
    try:
        resp = requests.post(
            TOKEN_URL,
            data={"grant_type": "client_credentials"},
            auth=(client_id, client_secret),
            timeout=request_timeout(settings),
        )
    except requests.RequestException as exc:
        raise AuthenticationError("SPOTIFY_AUTH_FAILED", f"Error fetching access token: {exc}") from exc

    if resp.status_code != 200:
        detail = _upstream_message(resp)
        suffix = f" ({detail})" if detail else ""
        raise AuthenticationError("SPOTIFY_AUTH_FAILED", f"Token request failed: {resp.status_code}{suffix}")

    payload = _json_object(resp)
    if payload is None:
        raise AuthenticationError("SPOTIFY_AUTH_FAILED", "Token response is not a JSON object")
    token = payload.get("access_token")
    if not token:
        raise AuthenticationError("SPOTIFY_AUTH_FAILED", "Missing access_token in Spotify response")
    return str(token)


def search_catalog(
    query: str,
    settings: dict[str, Any],
    item_type: str = "track",
    genre: str | None = None,
    limit: int = 10,
) -> list[dict[str, Any]]:
    token = get_app_token(settings)

    q = f"{query} genre:{genre}" if genre else query
    headers = {"Authorization": f"Bearer {token}"}
    params = {"q": q, "type": item_type, "limit": limit}
    logger.debug("Searching catalog: %s", params)
    try:
        resp = requests.get(SEARCH_URL, headers=headers, params=params, timeout=request_timeout(settings))
    except requests.RequestException as exc:
        raise CatalogError("SPOTIFY_REQUEST_FAILED", f"Search request failed: {exc}") from exc

    if resp.status_code == 429:
        retry_after = resp.headers.get("Retry-After", "unknown")
        raise CatalogError("SPOTIFY_RATE_LIMIT", f"Rate-limited by Spotify (Retry-After: {retry_after}s)")
    if resp.status_code != 200:
        detail = _upstream_message(resp)
        suffix = f" ({detail})" if detail else ""
        raise CatalogError("SPOTIFY_SEARCH_FAILED", f"Search request failed: {resp.status_code}{suffix}")

    payload = _json_object(resp)
    if payload is None:
        raise CatalogError("SPOTIFY_SEARCH_FAILED", "Search response is not a JSON object")
    section = payload.get(f"{item_type}s")
    items = (section.get("items") if isinstance(section, dict) else None) or []
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]
