"""Application-only OAuth session and endpoint wrappers for the reddit API."""
from __future__ import annotations

import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List
from urllib.parse import urlencode

import requests

from .comments import build_comment_tree
from .errors import AuthError, ConfigError, DecodeError, TransportError
from .models import (
    Comment,
    Redditor,
    Submission,
    Subreddit,
    Trophy,
    child_data,
    decode_envelope,
    listing_children,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "python:redditkit:0.1.0 (app-only OAuth client; +https://github.com/redditkit/redditkit)"
BASE_URL = "https://oauth.reddit.com"
TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
DEFAULT_TOKEN_LIFETIME = 3600
# Seconds shaved off a token's lifetime so it is refreshed before reddit rejects it.
TOKEN_EXPIRY_MARGIN = 10

TIME_FILTERS = {"hour", "day", "week", "month", "year", "all"}


class PopularitySort(str, Enum):
    """Sort keys accepted by listing endpoints."""

    DEFAULT = ""
    HOT = "hot"
    NEW = "new"
    RISING = "rising"
    TOP = "top"
    CONTROVERSIAL = "controversial"


@dataclass(slots=True)
class ListingOptions:
    """Optional pagination and filter parameters shared by listing endpoints."""

    after: str | None = None
    before: str | None = None
    count: int | None = None
    limit: int | None = None
    show_all: bool = False
    time_filter: str | None = None

    def __post_init__(self) -> None:
        if self.time_filter is not None and self.time_filter not in TIME_FILTERS:
            raise ValueError(f"Unsupported time filter: {self.time_filter}")
        if self.count is not None and self.count < 0:
            raise ValueError(f"count must be non-negative, got {self.count}")
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be non-negative, got {self.limit}")

    def to_params(self) -> dict[str, Any]:
        """Return the query parameters for the fields that are set.

        Empty strings and zero counts are treated as unset.
        """
        params: dict[str, Any] = {}
        if self.after:
            params["after"] = self.after
        if self.before:
            params["before"] = self.before
        if self.count:
            params["count"] = self.count
        if self.limit:
            params["limit"] = self.limit
        if self.show_all:
            params["show"] = "all"
        if self.time_filter:
            params["t"] = self.time_filter
        return params


def encode_query(params: dict[str, Any]) -> str:
    return urlencode(sorted(params.items()))


def _with_query(url: str, params: dict[str, Any]) -> str:
    query = encode_query(params)
    return f"{url}?{query}" if query else url


def _listing_params(options: ListingOptions | None, sort: PopularitySort | None = None) -> dict[str, Any]:
    params = options.to_params() if options is not None else {}
    if sort is not None and sort.value:
        params["sort"] = sort.value
    return params


def _decode_submissions(payload: Any) -> List[Submission]:
    return [Submission.from_dict(child_data(child)) for child in listing_children(payload)]


def _decode_trophies(payload: Any) -> List[Trophy]:
    return [Trophy.from_dict(child_data(child)) for child in listing_children(payload, "trophies")]


def build_session(user_agent: str) -> requests.Session:
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": user_agent,
            "Accept": "application/json",
        }
    )
    return session


class OAuthSession:
    """An application-only OAuth session with reddit.

    Credentials are only checked on the first API call; constructing a session
    performs no network I/O. The access token is refreshed in place whenever it
    has expired, under a lock so concurrent callers trigger a single exchange.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        user_agent: str = "",
        debug: bool = False,
        *,
        http: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.debug = debug
        self.timeout = timeout
        self.access_token: str | None = None
        self.token_expiry: float = 0.0
        self._http = http if http is not None else build_session(self.user_agent)
        self._token_lock = threading.Lock()

    @classmethod
    def from_env(cls, debug: bool = False, **kwargs: Any) -> "OAuthSession":
        """Build a session from ``REDDIT_CLIENT_ID``, ``REDDIT_CLIENT_SECRET`` and ``REDDIT_USER_AGENT``."""
        client_id = os.environ.get("REDDIT_CLIENT_ID", "").strip()
        client_secret = os.environ.get("REDDIT_CLIENT_SECRET", "").strip()
        missing = [
            name
            for name, value in (("REDDIT_CLIENT_ID", client_id), ("REDDIT_CLIENT_SECRET", client_secret))
            if not value
        ]
        if missing:
            raise ConfigError(f"Missing reddit credentials: {', '.join(missing)}")
        user_agent = os.environ.get("REDDIT_USER_AGENT", "").strip()
        return cls(client_id, client_secret, user_agent, debug, **kwargs)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "OAuthSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def ensure_token(self) -> str:
        """Return a valid access token, exchanging credentials when the current one expired."""
        with self._token_lock:
            if self.access_token is not None and time.time() < self.token_expiry:
                return self.access_token
            token, expires_in = self._exchange_token()
            self.access_token = token
            self.token_expiry = time.time() + expires_in - min(TOKEN_EXPIRY_MARGIN, expires_in // 2)
            logger.info("Obtained access token for client %s (expires in %d seconds)", self.client_id, expires_in)
            return token

    def _exchange_token(self) -> tuple[str, int]:
        try:
            response = self._http.post(
                TOKEN_URL,
                auth=requests.auth.HTTPBasicAuth(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials"},
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise AuthError(f"Token request failed: {exc}") from exc

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            raise AuthError(f"Token request rejected with HTTP {response.status_code}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthError(f"Token response is not valid JSON: {exc}") from exc

        if not isinstance(payload, dict) or not payload.get("access_token"):
            error = payload.get("error") if isinstance(payload, dict) else None
            raise AuthError(f"Token response missing access_token (error: {error})")

        raw_expires_in = payload.get("expires_in", DEFAULT_TOKEN_LIFETIME)
        try:
            expires_in = int(raw_expires_in)
        except (TypeError, ValueError):
            logger.warning(
                "Token response has malformed expires_in %r; assuming %d seconds",
                raw_expires_in,
                DEFAULT_TOKEN_LIFETIME,
            )
            expires_in = DEFAULT_TOKEN_LIFETIME
        return str(payload["access_token"]), expires_in

    def fetch_and_decode(self, url: str, decoder: Callable[[Any], Any] | None = None) -> Any:
        """GET ``url`` with the bearer token and decode the JSON body.

        Returns the raw JSON value, or ``decoder(payload)`` when a decoder is given.
        """
        token = self.ensure_token()
        headers = {
            "Authorization": f"bearer {token}",
            "User-Agent": self.user_agent,
        }
        logger.debug("GET %s", url)
        try:
            response = self._http.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        body = response.text
        if self.debug:
            logger.info("Response body from %s:\n%s", url, body)

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            raise TransportError(
                f"HTTP {response.status_code} fetching {url}", status_code=response.status_code
            ) from exc

        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise DecodeError(f"Failed to decode JSON from {url}: {exc}") from exc

        if decoder is None:
            return payload
        return decoder(payload)

    def listing(
        self,
        username: str,
        listing: str,
        sort: PopularitySort | str = PopularitySort.DEFAULT,
        options: ListingOptions | None = None,
    ) -> List[Submission]:
        """Return the submissions in one of a user's listings (``submitted``, ``upvoted``, ...)."""
        params = _listing_params(options, PopularitySort(sort))
        url = _with_query(f"{BASE_URL}/user/{username}/{listing}", params)
        return self.fetch_and_decode(url, _decode_submissions)

    def upvoted(
        self,
        username: str,
        sort: PopularitySort | str = PopularitySort.DEFAULT,
        options: ListingOptions | None = None,
    ) -> List[Submission]:
        return self.listing(username, "upvoted", sort, options)

    def about_redditor(self, username: str) -> Redditor:
        url = f"{BASE_URL}/user/{username}/about"
        return self.fetch_and_decode(url, lambda payload: decode_envelope(payload, Redditor))

    def user_trophies(self, username: str) -> List[Trophy]:
        url = f"{BASE_URL}/api/v1/user/{username}/trophies"
        return self.fetch_and_decode(url, _decode_trophies)

    def about_subreddit(self, name: str) -> Subreddit:
        url = f"{BASE_URL}/r/{name}/about"
        return self.fetch_and_decode(url, lambda payload: decode_envelope(payload, Subreddit))

    def comments(
        self,
        submission: Submission | str,
        sort: PopularitySort | str = PopularitySort.DEFAULT,
        options: ListingOptions | None = None,
    ) -> List[Comment]:
        """Return the comment forest of a submission, given the record or its id."""
        submission_id = submission.id if isinstance(submission, Submission) else submission
        params = _listing_params(options, PopularitySort(sort))
        url = _with_query(f"{BASE_URL}/comments/{submission_id}", params)
        return self.fetch_and_decode(url, build_comment_tree)

    def subreddit_submissions(
        self,
        subreddit: str,
        sort: PopularitySort | str = PopularitySort.DEFAULT,
        options: ListingOptions | None = None,
    ) -> List[Submission]:
        """Return a page of submissions; an empty ``subreddit`` selects the frontpage."""
        sort = PopularitySort(sort)
        base_url = BASE_URL
        if subreddit:
            base_url += f"/r/{subreddit}"
        url = _with_query(f"{base_url}/{sort.value}.json", _listing_params(options))
        return self.fetch_and_decode(url, _decode_submissions)

    def frontpage(
        self,
        sort: PopularitySort | str = PopularitySort.DEFAULT,
        options: ListingOptions | None = None,
    ) -> List[Submission]:
        return self.subreddit_submissions("", sort, options)
