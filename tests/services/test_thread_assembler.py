"""Tests for thread assembly and thread projections."""

import logging
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from threadline.db.time import utcnow
from threadline.models import ReactionType
from threadline.services.errors import NotFound, ValidationError
from threadline.services.reactions import ReactionLedger
from threadline.services.threads import ThreadService, assemble_thread

BASE = datetime(2024, 1, 1, 12, 0, 0)


def _post(post_id, parent=None, minute=0):
    return SimpleNamespace(
        id=post_id,
        parent_post_id=parent,
        created_at=BASE + timedelta(minutes=minute),
    )


def _order(entries):
    return [(entry.post.id, entry.depth) for entry in entries]


def test_root_then_replies_in_time_order() -> None:
    """Replies follow the root in ascending creation order."""
    posts = [_post("B", "R", 2), _post("R", None, 0), _post("A", "R", 1)]
    assert _order(assemble_thread(posts)) == [("R", 0), ("A", 1), ("B", 1)]


def test_subtrees_stay_contiguous() -> None:
    """Each reply is followed by its own subtree before the next sibling."""
    posts = [
        _post("R", None, 0),
        _post("A", "R", 1),
        _post("B", "R", 2),
        _post("A1", "A", 3),
        _post("B1", "B", 4),
        _post("A1a", "A1", 5),
    ]
    assert _order(assemble_thread(posts)) == [
        ("R", 0),
        ("A", 1),
        ("A1", 2),
        ("A1a", 3),
        ("B", 1),
        ("B1", 2),
    ]


def test_orphans_are_dropped(caplog) -> None:
    """Posts unreachable from the root are left out and logged."""
    posts = [_post("R", None, 0), _post("A", "R", 1), _post("X", "gone", 2)]
    with caplog.at_level(logging.WARNING):
        entries = assemble_thread(posts)
    assert _order(entries) == [("R", 0), ("A", 1)]
    assert "unreachable" in caplog.text


def test_no_root_keeps_input_order() -> None:
    """Without a root the posts come back as given, all at depth 0."""
    posts = [_post("B", "X", 2), _post("A", "X", 1)]
    assert _order(assemble_thread(posts)) == [("B", 0), ("A", 0)]


def test_cycles_do_not_loop() -> None:
    """A malformed cycle below the root emits each post once."""
    posts = [_post("R", None, 0), _post("A", "B", 1), _post("B", "A", 2)]
    assert _order(assemble_thread(posts)) == [("R", 0)]


def test_duplicate_posts_emitted_once() -> None:
    root = _post("R", None, 0)
    reply = _post("A", "R", 1)
    assert _order(assemble_thread([root, reply, reply])) == [("R", 0), ("A", 1)]


def test_deep_chain_does_not_recurse() -> None:
    """Very deep chains are walked without hitting recursion limits."""
    posts = [_post("p0", None, 0)]
    posts.extend(_post(f"p{i}", f"p{i - 1}", i) for i in range(1, 5000))
    entries = assemble_thread(posts)
    assert len(entries) == 5000
    assert entries[-1].depth == 4999


def test_get_thread_view(repo, test_user, other_user, make_post, test_post) -> None:
    """The stored thread is returned in conversation order."""
    first = make_post(other_user, "First", parent=test_post)
    second = make_post(test_user, "Second", parent=test_post)
    nested = make_post(test_user, "Nested", parent=first)

    view = ThreadService(repo).get_thread_view(test_post.thread_id)

    assert view.thread.id == test_post.thread_id
    assert [(entry.post.id, entry.depth) for entry in view.entries] == [
        (test_post.id, 0),
        (first.id, 1),
        (nested.id, 2),
        (second.id, 1),
    ]


def test_get_thread_view_unknown(repo) -> None:
    """Unknown threads yield None and malformed ids fail validation."""
    service = ThreadService(repo)
    assert service.get_thread_view("00000000-0000-4000-8000-000000000000") is None
    with pytest.raises(ValidationError):
        service.get_thread_view("thread-1")


def test_get_thread_view_by_original_post(repo, test_post) -> None:
    view = ThreadService(repo).get_thread_view_by_original_post(test_post.id)
    assert view.thread.original_post_id == test_post.id


def test_thread_participants(repo, test_user, other_user, make_post, test_post) -> None:
    """Participants are aggregated per author, most prolific first."""
    make_post(other_user, "One", parent=test_post)
    make_post(other_user, "Two", parent=test_post)
    ReactionLedger(repo).apply_reaction(test_user.id, test_post.id, ReactionType.LIKE)

    participants = ThreadService(repo).thread_participants(test_post.thread_id)

    assert [item.user_id for item in participants] == [other_user.id, test_user.id]
    assert participants[0].post_count == 2
    assert participants[1].total_likes == 1
    assert participants[1].total_replies == 2


def test_thread_participants_unknown_thread(repo) -> None:
    with pytest.raises(NotFound):
        ThreadService(repo).thread_participants("00000000-0000-4000-8000-000000000000")


def test_active_threads(repo, test_user, make_post) -> None:
    """Recently active threads come back most recent first, excluding stale ones."""
    now = utcnow()
    stale = make_post(test_user, "Stale", created_at=now - timedelta(hours=48))
    older = make_post(test_user, "Older", created_at=now - timedelta(hours=2))
    newer = make_post(test_user, "Newer", created_at=now - timedelta(hours=1))

    views = ThreadService(repo).active_threads(limit=10, hours_back=24, now=now)

    ids = [view.thread.original_post_id for view in views]
    assert ids == [newer.id, older.id]
    assert stale.id not in ids


def test_trending_threads_rank_by_engagement(repo, test_user, other_user, make_post) -> None:
    """Trending threads rank by likes and skip locked threads."""
    quiet = make_post(test_user, "Quiet")
    popular = make_post(test_user, "Popular")
    locked = make_post(test_user, "Locked")
    ledger = ReactionLedger(repo)
    ledger.apply_reaction(other_user.id, popular.id, ReactionType.LIKE)
    ledger.apply_reaction(test_user.id, popular.id, ReactionType.LIKE)
    ledger.apply_reaction(other_user.id, locked.id, ReactionType.LIKE)
    ledger.apply_reaction(test_user.id, locked.id, ReactionType.LIKE)
    with repo.unit_of_work():
        repo.update_thread_metrics(locked.thread_id, {"is_locked": True})

    views = ThreadService(repo).trending_threads(limit=10)

    ids = [view.thread.original_post_id for view in views]
    assert ids[0] == popular.id
    assert quiet.id in ids
    assert locked.id not in ids


def test_listing_arguments_are_validated(repo) -> None:
    with pytest.raises(ValidationError):
        ThreadService(repo).active_threads(limit=0)
    with pytest.raises(ValidationError):
        ThreadService(repo).trending_threads(hours_back=0)
