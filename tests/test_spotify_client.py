from __future__ import annotations

import json

import pytest
import requests

from fetcher.core.errors import AuthenticationError, CatalogError, ConfigurationError
from fetcher.core.spotify_client import get_app_token, search_catalog


@pytest.fixture
def credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")


@pytest.fixture
def token_ok(monkeypatch: pytest.MonkeyPatch, credentials, make_response) -> None:
    monkeypatch.setattr(
        "fetcher.core.spotify_client.requests.post",
        lambda *args, **kwargs: make_response(200, {"access_token": "abc"}),
    )


def _html_response(status_code: int) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = b"<html>maintenance</html>"
    resp.encoding = "utf-8"
    return resp


def test_get_app_token_missing_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "secret")

    def no_network(*args, **kwargs):
        raise AssertionError("token endpoint must not be called")

    monkeypatch.setattr("fetcher.core.spotify_client.requests.post", no_network)
    with pytest.raises(ConfigurationError) as exc:
        get_app_token({"spotify": {}})
    assert exc.value.code == "CONFIG_MISSING_CREDENTIALS"


def test_get_app_token_empty_secret_is_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "")
    with pytest.raises(ConfigurationError):
        get_app_token({})


def test_get_app_token_uses_basic_auth(monkeypatch: pytest.MonkeyPatch, credentials, make_response) -> None:
    seen = {}

    def fake_post(url, data=None, auth=None, timeout=None):
        seen.update(url=url, data=data, auth=auth, timeout=timeout)
        return make_response(200, {"access_token": "abc", "expires_in": 3600})

    monkeypatch.setattr("fetcher.core.spotify_client.requests.post", fake_post)
    assert get_app_token({"spotify": {"request_timeout_sec": 3}}) == "abc"
    assert seen["url"] == "https://accounts.spotify.com/api/token"
    assert seen["data"] == {"grant_type": "client_credentials"}
    assert seen["auth"] == ("id", "secret")
    assert seen["timeout"] == 3


def test_get_app_token_custom_env_names(monkeypatch: pytest.MonkeyPatch, make_response) -> None:
    monkeypatch.setenv("MY_ID", "other-id")
    monkeypatch.setenv("MY_SECRET", "other-secret")
    seen = {}

    def fake_post(url, data=None, auth=None, timeout=None):
        seen["auth"] = auth
        return make_response(200, {"access_token": "abc"})

    monkeypatch.setattr("fetcher.core.spotify_client.requests.post", fake_post)
    get_app_token({"spotify": {"client_id_env": "MY_ID", "client_secret_env": "MY_SECRET"}})
    assert seen["auth"] == ("other-id", "other-secret")


def test_get_app_token_surfaces_upstream_error(monkeypatch: pytest.MonkeyPatch, credentials, make_response) -> None:
    monkeypatch.setattr(
        "fetcher.core.spotify_client.requests.post",
        lambda *args, **kwargs: make_response(
            400, {"error": "invalid_client", "error_description": "Invalid client secret"}
        ),
    )
    with pytest.raises(AuthenticationError) as exc:
        get_app_token({})
    assert exc.value.code == "SPOTIFY_AUTH_FAILED"
    assert "Invalid client secret" in exc.value.message


def test_get_app_token_transport_failure(monkeypatch: pytest.MonkeyPatch, credentials) -> None:
    def boom(*args, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr("fetcher.core.spotify_client.requests.post", boom)
    with pytest.raises(AuthenticationError) as exc:
        get_app_token({})
    assert "connection refused" in exc.value.message


def test_get_app_token_missing_token(monkeypatch: pytest.MonkeyPatch, credentials, make_response) -> None:
    monkeypatch.setattr(
        "fetcher.core.spotify_client.requests.post",
        lambda *args, **kwargs: make_response(200, {"token_type": "Bearer"}),
    )
    with pytest.raises(AuthenticationError):
        get_app_token({})


def test_get_app_token_non_json_body(monkeypatch: pytest.MonkeyPatch, credentials) -> None:
    monkeypatch.setattr("fetcher.core.spotify_client.requests.post", lambda *args, **kwargs: _html_response(200))
    with pytest.raises(AuthenticationError) as exc:
        get_app_token({})
    assert exc.value.code == "SPOTIFY_AUTH_FAILED"


def test_get_app_token_non_object_body(monkeypatch: pytest.MonkeyPatch, credentials, make_response) -> None:
    monkeypatch.setattr(
        "fetcher.core.spotify_client.requests.post",
        lambda *args, **kwargs: make_response(200, ["abc"]),
    )
    with pytest.raises(AuthenticationError):
        get_app_token({})


def test_search_catalog_sends_query_and_bearer(monkeypatch: pytest.MonkeyPatch, token_ok, make_response) -> None:
    seen = {}

    def fake_get(url, headers=None, params=None, timeout=None):
        seen.update(url=url, headers=headers, params=params)
        return make_response(200, {"tracks": {"items": [{"name": "One More Time"}]}})

    monkeypatch.setattr("fetcher.core.spotify_client.requests.get", fake_get)
    out = search_catalog("Daft Punk", {}, genre="house", limit=2)

    assert out == [{"name": "One More Time"}]
    assert seen["url"] == "https://api.spotify.com/v1/search"
    assert seen["headers"] == {"Authorization": "Bearer abc"}
    assert seen["params"] == {"q": "Daft Punk genre:house", "type": "track", "limit": 2}


def test_search_catalog_without_genre_keeps_query(monkeypatch: pytest.MonkeyPatch, token_ok, make_response) -> None:
    seen = {}

    def fake_get(url, headers=None, params=None, timeout=None):
        seen["params"] = params
        return make_response(200, {"tracks": {"items": []}})

    monkeypatch.setattr("fetcher.core.spotify_client.requests.get", fake_get)
    assert search_catalog("Daft Punk", {}) == []
    assert seen["params"]["q"] == "Daft Punk"
    assert seen["params"]["limit"] == 10


def test_search_catalog_reads_items_for_type(monkeypatch: pytest.MonkeyPatch, token_ok, make_response) -> None:
    monkeypatch.setattr(
        "fetcher.core.spotify_client.requests.get",
        lambda *args, **kwargs: make_response(200, {"albums": {"items": [{"name": "Discovery"}, "junk"]}}),
    )
    assert search_catalog("Discovery", {}, item_type="album") == [{"name": "Discovery"}]


def test_search_catalog_rate_limit(monkeypatch: pytest.MonkeyPatch, token_ok, make_response) -> None:
    monkeypatch.setattr(
        "fetcher.core.spotify_client.requests.get",
        lambda *args, **kwargs: make_response(429, headers={"Retry-After": "5"}),
    )
    with pytest.raises(CatalogError) as exc:
        search_catalog("track", {}, limit=5)
    assert exc.value.code == "SPOTIFY_RATE_LIMIT"


def test_search_catalog_http_error_message(monkeypatch: pytest.MonkeyPatch, token_ok, make_response) -> None:
    monkeypatch.setattr(
        "fetcher.core.spotify_client.requests.get",
        lambda *args, **kwargs: make_response(400, {"error": {"status": 400, "message": "Invalid limit"}}),
    )
    with pytest.raises(CatalogError) as exc:
        search_catalog("track", {})
    assert exc.value.code == "SPOTIFY_SEARCH_FAILED"
    assert "Invalid limit" in exc.value.message


def test_search_catalog_error_with_text_body(monkeypatch: pytest.MonkeyPatch, token_ok, make_response) -> None:
    monkeypatch.setattr(
        "fetcher.core.spotify_client.requests.get",
        lambda *args, **kwargs: make_response(502, json.JSONDecodeError("x", "", 0), text="Bad Gateway"),
    )
    with pytest.raises(CatalogError) as exc:
        search_catalog("track", {})
    assert "Bad Gateway" in exc.value.message


def test_search_catalog_non_json_body(monkeypatch: pytest.MonkeyPatch, token_ok) -> None:
    monkeypatch.setattr("fetcher.core.spotify_client.requests.get", lambda *args, **kwargs: _html_response(200))
    with pytest.raises(CatalogError) as exc:
        search_catalog("track", {})
    assert exc.value.code == "SPOTIFY_SEARCH_FAILED"


def test_search_catalog_malformed_section_is_empty(monkeypatch: pytest.MonkeyPatch, token_ok, make_response) -> None:
    monkeypatch.setattr(
        "fetcher.core.spotify_client.requests.get",
        lambda *args, **kwargs: make_response(200, {"tracks": ["not", "a", "page"]}),
    )
    assert search_catalog("track", {}) == []


def test_search_catalog_transport_failure(monkeypatch: pytest.MonkeyPatch, token_ok) -> None:
    def boom(*args, **kwargs):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr("fetcher.core.spotify_client.requests.get", boom)
    with pytest.raises(CatalogError) as exc:
        search_catalog("track", {})
    assert exc.value.code == "SPOTIFY_REQUEST_FAILED"
