from __future__ import annotations


class MusicFetcherError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class ConfigurationError(MusicFetcherError):
    pass


class AuthenticationError(MusicFetcherError):
    pass


class CatalogError(MusicFetcherError):
    pass


class StoreError(MusicFetcherError):
    pass
