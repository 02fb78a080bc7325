"""Typed records decoded from reddit "thing" payloads."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeVar

from .errors import DecodeError

KIND_COMMENT = "t1"
KIND_ACCOUNT = "t2"
KIND_LINK = "t3"
KIND_SUBREDDIT = "t5"
KIND_AWARD = "t6"
KIND_MORE = "more"

T = TypeVar("T")


def _get(data: dict[str, Any], key: str, expected: type | tuple[type, ...], default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    # bool is a subclass of int
    if not isinstance(value, expected) or (isinstance(value, bool) and expected is not bool):
        raise DecodeError(f"Field {key!r} has unexpected type {type(value).__name__}")
    return value


def _str(data: dict[str, Any], key: str) -> str:
    return _get(data, key, str, "")


def _opt_str(data: dict[str, Any], key: str) -> str | None:
    return _get(data, key, str, None)


def _integral(key: str, value: int | float) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise DecodeError(f"Field {key!r} is not an integer: {value!r}")
    return int(value)


def _int(data: dict[str, Any], key: str) -> int:
    return _integral(key, _get(data, key, (int, float), 0))


def _opt_int(data: dict[str, Any], key: str) -> int | None:
    value = _get(data, key, (int, float), None)
    return None if value is None else _integral(key, value)


def _float(data: dict[str, Any], key: str) -> float:
    return float(_get(data, key, (int, float), 0.0))


def _bool(data: dict[str, Any], key: str) -> bool:
    return _get(data, key, bool, False)


def _require_object(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a JSON object for {what}, got {type(data).__name__}")
    return data


@dataclass(slots=True)
class Submission:
    """A link or self post."""

    id: str = ""
    name: str = ""
    title: str = ""
    author: str = ""
    subreddit: str = ""
    subreddit_id: str = ""
    url: str = ""
    domain: str = ""
    permalink: str = ""
    selftext: str = ""
    selftext_html: str | None = None
    thumbnail: str = ""
    created_utc: float = 0.0
    num_comments: int = 0
    score: int = 0
    ups: int = 0
    downs: int = 0
    upvote_ratio: float = 0.0
    over_18: bool = False
    is_self: bool = False
    stickied: bool = False
    link_flair_text: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Submission":
        data = _require_object(data, "submission")
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            title=_str(data, "title"),
            author=_str(data, "author"),
            subreddit=_str(data, "subreddit"),
            subreddit_id=_str(data, "subreddit_id"),
            url=_str(data, "url"),
            domain=_str(data, "domain"),
            permalink=_str(data, "permalink"),
            selftext=_str(data, "selftext"),
            selftext_html=_opt_str(data, "selftext_html"),
            thumbnail=_str(data, "thumbnail"),
            created_utc=_float(data, "created_utc"),
            num_comments=_int(data, "num_comments"),
            score=_int(data, "score"),
            ups=_int(data, "ups"),
            downs=_int(data, "downs"),
            upvote_ratio=_float(data, "upvote_ratio"),
            over_18=_bool(data, "over_18"),
            is_self=_bool(data, "is_self"),
            stickied=_bool(data, "stickied"),
            link_flair_text=_opt_str(data, "link_flair_text"),
        )

    def __str__(self) -> str:
        return f"{self.score} - {self.title} ({self.num_comments} comments)"


@dataclass(slots=True)
class Comment:
    """A single comment. ``replies`` holds the decoded child comments in order."""

    id: str = ""
    name: str = ""
    author: str = ""
    body: str = ""
    body_html: str = ""
    subreddit: str = ""
    subreddit_id: str = ""
    link_id: str = ""
    parent_id: str = ""
    permalink: str = ""
    score: int = 0
    ups: int = 0
    downs: int = 0
    created_utc: float = 0.0
    edited: bool | float = False
    depth: int = 0
    is_submitter: bool = False
    author_flair_text: str | None = None
    author_flair_css_class: str | None = None
    banned_by: str | None = None
    approved_by: str | None = None
    replies: list["Comment"] = field(default_factory=list)
    has_more_replies: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "Comment":
        """Decode the scalar fields of a comment; ``replies`` is left empty."""
        data = _require_object(data, "comment")
        edited = data.get("edited")
        if edited is None:
            edited = False
        elif not isinstance(edited, (bool, int, float)):
            raise DecodeError(f"Field 'edited' has unexpected type {type(edited).__name__}")
        elif not isinstance(edited, bool):
            edited = float(edited)
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            author=_str(data, "author"),
            body=_str(data, "body"),
            body_html=_str(data, "body_html"),
            subreddit=_str(data, "subreddit"),
            subreddit_id=_str(data, "subreddit_id"),
            link_id=_str(data, "link_id"),
            parent_id=_str(data, "parent_id"),
            permalink=_str(data, "permalink"),
            score=_int(data, "score"),
            ups=_int(data, "ups"),
            downs=_int(data, "downs"),
            created_utc=_float(data, "created_utc"),
            edited=edited,
            depth=_int(data, "depth"),
            is_submitter=_bool(data, "is_submitter"),
            author_flair_text=_opt_str(data, "author_flair_text"),
            author_flair_css_class=_opt_str(data, "author_flair_css_class"),
            banned_by=_opt_str(data, "banned_by"),
            approved_by=_opt_str(data, "approved_by"),
        )

    def __str__(self) -> str:
        return f"{self.author}: {self.body}"


@dataclass(slots=True)
class Redditor:
    id: str = ""
    name: str = ""
    link_karma: int = 0
    comment_karma: int = 0
    created_utc: float = 0.0
    is_gold: bool = False
    is_mod: bool = False
    is_employee: bool = False
    verified: bool = False
    icon_img: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Redditor":
        data = _require_object(data, "redditor")
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            link_karma=_int(data, "link_karma"),
            comment_karma=_int(data, "comment_karma"),
            created_utc=_float(data, "created_utc"),
            is_gold=_bool(data, "is_gold"),
            is_mod=_bool(data, "is_mod"),
            is_employee=_bool(data, "is_employee"),
            verified=_bool(data, "verified"),
            icon_img=_str(data, "icon_img"),
        )

    @property
    def total_karma(self) -> int:
        return self.link_karma + self.comment_karma

    def __str__(self) -> str:
        return f"{self.name} ({self.link_karma}-{self.comment_karma})"


@dataclass(slots=True)
class Subreddit:
    id: str = ""
    name: str = ""
    display_name: str = ""
    title: str = ""
    description: str = ""
    public_description: str = ""
    url: str = ""
    header_img: str | None = None
    header_title: str | None = None
    over18: bool = False
    created_utc: float = 0.0
    subscribers: int = 0
    active_user_count: int | None = None
    subreddit_type: str = ""
    lang: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Subreddit":
        data = _require_object(data, "subreddit")
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            display_name=_str(data, "display_name"),
            title=_str(data, "title"),
            description=_str(data, "description"),
            public_description=_str(data, "public_description"),
            url=_str(data, "url"),
            header_img=_opt_str(data, "header_img"),
            header_title=_opt_str(data, "header_title"),
            over18=_bool(data, "over18"),
            created_utc=_float(data, "created_utc"),
            subscribers=_int(data, "subscribers"),
            active_user_count=_opt_int(data, "active_user_count"),
            subreddit_type=_str(data, "subreddit_type"),
            lang=_str(data, "lang"),
        )

    def __str__(self) -> str:
        return self.title or self.display_name


@dataclass(slots=True)
class Trophy:
    id: str | None = None
    name: str = ""
    description: str | None = None
    award_id: str | None = None
    url: str | None = None
    icon_40: str = ""
    icon_70: str = ""
    granted_at: float | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Trophy":
        data = _require_object(data, "trophy")
        granted_at = _get(data, "granted_at", (int, float), None)
        return cls(
            id=_opt_str(data, "id"),
            name=_str(data, "name"),
            description=_opt_str(data, "description"),
            award_id=_opt_str(data, "award_id"),
            url=_opt_str(data, "url"),
            icon_40=_str(data, "icon_40"),
            icon_70=_str(data, "icon_70"),
            granted_at=None if granted_at is None else float(granted_at),
        )

    def __str__(self) -> str:
        return self.name


KIND_TYPES: dict[str, type] = {
    KIND_COMMENT: Comment,
    KIND_ACCOUNT: Redditor,
    KIND_LINK: Submission,
    KIND_SUBREDDIT: Subreddit,
    KIND_AWARD: Trophy,
}


def decode_thing(node: Any) -> Any:
    """Decode a ``{"kind": ..., "data": {...}}`` node using its kind discriminator."""
    node = _require_object(node, "thing")
    kind = node.get("kind")
    cls = KIND_TYPES.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise DecodeError(f"Unsupported thing kind: {kind!r}")
    return cls.from_dict(node.get("data"))


def decode_envelope(payload: Any, cls: type[T]) -> T:
    """Decode a single-record ``{"data": {...}}`` envelope into ``cls``."""
    payload = _require_object(payload, "response")
    kind = payload.get("kind")
    if kind is not None and (not isinstance(kind, str) or KIND_TYPES.get(kind) is not cls):
        raise DecodeError(f"Expected a {cls.__name__} record, got kind {kind!r}")
    return cls.from_dict(payload.get("data"))


def listing_children(listing: Any, key: str = "children") -> list[Any]:
    """Return the ``data.<key>`` array of a listing envelope."""
    listing = _require_object(listing, "listing")
    data = listing.get("data")
    if not isinstance(data, dict):
        raise DecodeError("Listing is missing its data object")
    children = data.get(key)
    if children is None:
        return []
    if not isinstance(children, list):
        raise DecodeError(f"Listing {key} is not an array")
    return children


def child_data(child: Any) -> Any:
    return _require_object(child, "listing child").get("data")
