from __future__ import annotations

import pytest

from redditkit.errors import DecodeError
from redditkit.models import (
    Comment,
    Redditor,
    Submission,
    Subreddit,
    Trophy,
    decode_envelope,
    decode_thing,
    listing_children,
)


def test_submission_from_dict_reads_known_fields():
    submission = Submission.from_dict(
        {
            "id": "abc123",
            "name": "t3_abc123",
            "title": "Hello World",
            "author": "spez",
            "subreddit": "test",
            "score": 12,
            "num_comments": 3,
            "upvote_ratio": 0.97,
            "created_utc": 1700000000,
            "over_18": False,
            "selftext_html": None,
            "unknown_field": {"ignored": True},
        }
    )

    assert submission.id == "abc123"
    assert submission.created_utc == 1700000000.0
    assert submission.selftext_html is None
    assert submission.link_flair_text is None
    assert str(submission) == "12 - Hello World (3 comments)"


def test_wrong_field_types_raise_decode_error():
    with pytest.raises(DecodeError):
        Submission.from_dict({"id": 123})
    with pytest.raises(DecodeError):
        Submission.from_dict({"score": True})
    with pytest.raises(DecodeError):
        Redditor.from_dict({"is_mod": "yes"})
    with pytest.raises(DecodeError):
        Subreddit.from_dict(["not", "an", "object"])


def test_comment_edited_accepts_false_or_timestamp():
    assert Comment.from_dict({"edited": False}).edited is False
    assert Comment.from_dict({"edited": 1700000000}).edited == 1700000000.0
    assert Comment.from_dict({}).replies == []
    with pytest.raises(DecodeError):
        Comment.from_dict({"edited": "yesterday"})


def test_decode_thing_dispatches_on_kind():
    assert isinstance(decode_thing({"kind": "t1", "data": {"id": "c1"}}), Comment)
    assert isinstance(decode_thing({"kind": "t2", "data": {"name": "spez"}}), Redditor)
    assert isinstance(decode_thing({"kind": "t3", "data": {"id": "s1"}}), Submission)
    assert isinstance(decode_thing({"kind": "t5", "data": {"display_name": "python"}}), Subreddit)
    assert isinstance(decode_thing({"kind": "t6", "data": {"name": "Verified Email"}}), Trophy)

    with pytest.raises(DecodeError):
        decode_thing({"kind": "more", "data": {}})


def test_decode_envelope_checks_kind_when_present():
    redditor = decode_envelope({"data": {"name": "spez", "link_karma": 1, "comment_karma": 2}}, Redditor)

    assert redditor.total_karma == 3
    with pytest.raises(DecodeError):
        decode_envelope({"kind": "t5", "data": {}}, Redditor)
    with pytest.raises(DecodeError):
        decode_envelope({"kind": "t2"}, Redditor)


def test_listing_children_validates_envelope():
    assert listing_children({"data": {"children": [1, 2]}}) == [1, 2]
    assert listing_children({"data": {"trophies": []}}, "trophies") == []

    with pytest.raises(DecodeError):
        listing_children({"children": []})
    with pytest.raises(DecodeError):
        listing_children({"data": {"children": "nope"}})


def test_integer_fields_reject_fractional_numbers():
    assert Submission.from_dict({"score": 7.0}).score == 7
    with pytest.raises(DecodeError):
        Submission.from_dict({"score": 1.5})
    with pytest.raises(DecodeError):
        Subreddit.from_dict({"active_user_count": 2.25})
