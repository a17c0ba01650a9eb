"""Tests for building signal feeds from stored threads."""

from datetime import timedelta

import pytest

from townsquare.core.settings import settings
from townsquare.services.errors import InvalidRequestError
from townsquare.services.feed import SignalFeedService


@pytest.fixture()
def voices(make_user):
    return [make_user(f"voice{i}") for i in range(7)]


def _discuss(make_comment, post, voices, count, *, age=timedelta(minutes=5)):
    return [
        make_comment(post, voices[i % len(voices)], body=f"reply {i}", age=age + timedelta(seconds=i))
        for i in range(count)
    ]


def test_lively_thread_outranks_upvoted_quiet_one(
    db_session, now, make_post, make_comment, author, community, voices,
) -> None:
    quiet = make_post(author, community, title="Quiet", upvotes=20)
    lively = make_post(author, community, title="Lively")
    _discuss(make_comment, lively, voices[:4], 6)

    page = SignalFeedService(db_session).fetch("hot", now=now)
    assert [item.post_id for item in page.items] == [lively.id, quiet.id]
    assert page.live_count == 1
    assert page.filter == "hot"


def test_deleted_posts_are_not_ranked(db_session, now, make_post, author, community) -> None:
    kept = make_post(author, community)
    removed = make_post(author, community)
    removed.deleted = True
    db_session.commit()

    page = SignalFeedService(db_session).fetch("hot", now=now)
    assert [item.post_id for item in page.items] == [kept.id]


def test_live_window_reaches_older_threads(
    db_session, now, make_post, make_comment, author, community, voices,
) -> None:
    old = make_post(author, community, title="Old but active", age=timedelta(days=10))
    ancient = make_post(author, community, title="Ancient", age=timedelta(days=40))
    _discuss(make_comment, old, voices, 2)
    _discuss(make_comment, ancient, voices, 2)

    service = SignalFeedService(db_session)
    assert service.fetch("hot", now=now).items == []
    live = service.fetch("live", now=now)
    assert [item.post_id for item in live.items] == [old.id]


def test_thread_details(db_session, now, make_post, make_comment, author, community, voices) -> None:
    post = make_post(author, community)
    long_body = "x" * 100
    make_comment(post, voices[0], body="oldest", age=timedelta(minutes=50))
    for index, voice in enumerate(voices):
        make_comment(post, voice, body=long_body, age=timedelta(minutes=index + 1))
    gone = make_comment(post, voices[0], body="removed", age=timedelta(seconds=1))
    gone.deleted = True
    db_session.commit()

    thread = SignalFeedService(db_session).fetch("hot", now=now).items[0]
    details = thread.details
    assert details.comment_count == 8
    assert details.author.username == "author"
    assert details.community.name == "General"
    assert [p.username for p in details.recent_participants] == [
        "voice0", "voice1", "voice2", "voice3", "voice4",
    ]
    assert len(details.preview_replies) == 3
    assert details.preview_replies[0].author == "voice0"
    assert details.preview_replies[0].content == "x" * 80 + "..."


def test_comment_window_is_bounded(
    db_session, now, make_post, make_comment, author, community, voices, monkeypatch,
) -> None:
    monkeypatch.setattr(settings, "comment_window", 3)
    post = make_post(author, community)
    _discuss(make_comment, post, voices, 6)

    thread = SignalFeedService(db_session).fetch("hot", now=now).items[0]
    assert thread.details.comment_count == 6
    assert thread.metrics.replies_in_last_30_min == 3


def test_rising_filter(db_session, now, make_post, make_comment, author, community, voices) -> None:
    slow = make_post(author, community)
    fast = make_post(author, community)
    _discuss(make_comment, slow, voices, 1)
    _discuss(make_comment, fast, voices, 4)

    page = SignalFeedService(db_session).fetch("rising", now=now)
    assert [item.post_id for item in page.items] == [fast.id]


def test_empty_store(db_session, now) -> None:
    page = SignalFeedService(db_session).fetch("deep", now=now)
    assert page.items == []
    assert page.total == 0
    assert page.has_more is False


def test_unknown_filter(db_session) -> None:
    with pytest.raises(InvalidRequestError):
        SignalFeedService(db_session).fetch("best")
