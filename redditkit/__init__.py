"""Public package surface for redditkit."""
from .comments import build_comment_tree
from .core import (
    BASE_URL,
    DEFAULT_USER_AGENT,
    TOKEN_URL,
    ListingOptions,
    OAuthSession,
    PopularitySort,
    build_session,
    encode_query,
)
from .errors import AuthError, ConfigError, DecodeError, RedditKitError, TransportError
from .models import Comment, Redditor, Submission, Subreddit, Trophy, decode_thing

__version__ = "0.1.0"

__all__ = [
    "BASE_URL",
    "DEFAULT_USER_AGENT",
    "TOKEN_URL",
    "AuthError",
    "Comment",
    "ConfigError",
    "DecodeError",
    "ListingOptions",
    "OAuthSession",
    "PopularitySort",
    "RedditKitError",
    "Redditor",
    "Submission",
    "Subreddit",
    "TransportError",
    "Trophy",
    "build_comment_tree",
    "build_session",
    "decode_thing",
    "encode_query",
    "__version__",
]
