from __future__ import annotations

import pytest


class FakeResponse:
    def __init__(self, status_code: int, payload=None, headers: dict | None = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = {} if payload is None else payload
        self.headers = headers or {}
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def make_response():
    return FakeResponse
