"""Error hierarchy raised by the redditkit client."""
from __future__ import annotations


class RedditKitError(Exception):
    """Base class for every error raised by redditkit."""


class AuthError(RedditKitError):
    """The client-credentials token exchange failed."""


class TransportError(RedditKitError):
    """An API request could not be sent or returned a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(RedditKitError):
    """A response body was not valid JSON or did not have the expected shape."""


class ConfigError(RedditKitError):
    """Credentials or other configuration are missing or unusable."""
