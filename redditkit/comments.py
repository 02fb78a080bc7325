"""Rebuild nested comment forests from reddit listing payloads."""
from __future__ import annotations

import logging
from typing import Any, List

from .errors import DecodeError
from .models import KIND_COMMENT, KIND_LINK, KIND_MORE, Comment, decode_thing, listing_children

logger = logging.getLogger(__name__)


def build_comment_tree(payload: Any) -> List[Comment]:
    """Decode a comments response into top-level comments with nested replies.

    ``payload`` is either a single listing envelope or the comments endpoint's
    ``[link listing, comment listing]`` array. The tree is walked with an explicit
    stack, so nesting depth is bounded by the payload size only.

    ``more`` stubs are not returned; a stub among a comment's replies sets that
    comment's ``has_more_replies`` flag instead.
    """
    if isinstance(payload, list):
        listings = payload
    elif isinstance(payload, dict):
        listings = [payload]
    else:
        raise DecodeError(f"Unexpected comments payload type {type(payload).__name__}")

    roots: List[Comment] = []
    stack: list[tuple[list[Any], List[Comment], Comment | None]] = [
        (listing_children(listing), roots, None) for listing in reversed(listings)
    ]

    while stack:
        children, destination, parent = stack.pop()
        for node in children:
            if not isinstance(node, dict):
                raise DecodeError(f"Listing child is not an object: {node!r}")
            kind = node.get("kind")
            if kind == KIND_COMMENT:
                data = node.get("data")
                comment = decode_thing(node)
                destination.append(comment)
                replies = data.get("replies")
                if isinstance(replies, dict):
                    reply_children = listing_children(replies) if replies else []
                    if reply_children:
                        stack.append((reply_children, comment.replies, comment))
                elif replies not in (None, ""):
                    raise DecodeError(f"Comment {comment.id!r} has malformed replies")
            elif kind == KIND_MORE:
                if parent is not None:
                    parent.has_more_replies = True
                else:
                    logger.debug("Dropping top-level 'more' stub")
            elif kind == KIND_LINK:
                continue
            else:
                raise DecodeError(f"Unexpected kind in comment listing: {kind!r}")

    return roots
