from __future__ import annotations

import pytest

import redditkit.models as models
from redditkit.comments import build_comment_tree
from redditkit.errors import DecodeError
from redditkit.models import Comment


def listing(*children: dict) -> dict:
    return {"kind": "Listing", "data": {"after": None, "children": list(children)}}


def comment(comment_id: str, *replies: dict, **fields) -> dict:
    data = {"id": comment_id, "name": f"t1_{comment_id}", "body": f"body {comment_id}", **fields}
    data["replies"] = listing(*replies) if replies else ""
    return {"kind": "t1", "data": data}


def more(*ids: str) -> dict:
    return {"kind": "more", "data": {"count": len(ids), "children": list(ids), "id": ids[0] if ids else "_"}}


def test_build_comment_tree_preserves_order_at_every_level():
    payload = listing(
        comment("c1", comment("c1a"), comment("c1b"), comment("c1c")),
        comment("c2"),
        comment("c3", comment("c3a", comment("c3a1"), comment("c3a2"))),
    )

    roots = build_comment_tree(payload)

    assert [c.id for c in roots] == ["c1", "c2", "c3"]
    assert [c.id for c in roots[0].replies] == ["c1a", "c1b", "c1c"]
    assert roots[1].replies == []
    assert [c.id for c in roots[2].replies[0].replies] == ["c3a1", "c3a2"]


def test_build_comment_tree_skips_submission_listing():
    submission_listing = listing({"kind": "t3", "data": {"id": "abc123", "title": "Post"}})
    payload = [submission_listing, listing(comment("c1", comment("r1"), comment("r2")))]

    roots = build_comment_tree(payload)

    assert len(roots) == 1
    assert roots[0].id == "c1"
    assert [c.id for c in roots[0].replies] == ["r1", "r2"]


def test_empty_children_yields_empty_result():
    assert build_comment_tree(listing()) == []
    assert build_comment_tree({"data": {}}) == []


def test_absent_or_empty_replies_yield_empty_sequence():
    payload = listing(
        {"kind": "t1", "data": {"id": "a"}},
        {"kind": "t1", "data": {"id": "b", "replies": None}},
        {"kind": "t1", "data": {"id": "c", "replies": ""}},
        {"kind": "t1", "data": {"id": "d", "replies": listing()}},
    )

    roots = build_comment_tree(payload)

    assert [c.id for c in roots] == ["a", "b", "c", "d"]
    assert all(c.replies == [] for c in roots)


def test_more_stubs_are_dropped_and_flag_parent():
    payload = listing(
        comment("c1", comment("r1"), more("r2", "r3")),
        comment("c2"),
        more("c3", "c4"),
    )

    roots = build_comment_tree(payload)

    assert [c.id for c in roots] == ["c1", "c2"]
    assert [c.id for c in roots[0].replies] == ["r1"]
    assert roots[0].has_more_replies is True
    assert roots[1].has_more_replies is False


def test_deep_nesting_does_not_recurse():
    depth = 3000
    node = comment(f"c{depth}")
    for level in range(depth - 1, 0, -1):
        node = comment(f"c{level}", node)

    roots = build_comment_tree(listing(node))

    current = roots[0]
    seen = 1
    while current.replies:
        current = current.replies[0]
        seen += 1
    assert seen == depth
    assert current.id == f"c{depth}"


def test_scalar_fields_are_decoded():
    payload = listing(
        comment(
            "c1",
            author="spez",
            score=42,
            created_utc=1700000000.0,
            edited=1700000500,
            parent_id="t3_abc123",
            depth=0,
        )
    )

    (root,) = build_comment_tree(payload)

    assert root.author == "spez"
    assert root.score == 42
    assert root.edited == 1700000500.0
    assert root.parent_id == "t3_abc123"
    assert str(root) == "spez: body c1"


@pytest.mark.parametrize(
    "payload",
    [
        "not a listing",
        listing({"kind": "t2", "data": {"name": "spez"}}),
        listing({"kind": "t1", "data": {"id": "c1", "replies": ["bad"]}}),
        listing({"kind": "t1", "data": "nope"}),
        {"data": {"children": {"kind": "t1"}}},
    ],
)
def test_malformed_payloads_raise_decode_error(payload):
    with pytest.raises(DecodeError):
        build_comment_tree(payload)


def test_comments_are_decoded_through_kind_table(monkeypatch):
    class TaggedComment(Comment):
        pass

    monkeypatch.setitem(models.KIND_TYPES, "t1", TaggedComment)

    roots = build_comment_tree(listing(comment("c1", comment("r1"))))

    assert isinstance(roots[0], TaggedComment)
    assert isinstance(roots[0].replies[0], TaggedComment)
