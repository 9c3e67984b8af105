"""Tests for post authoring and thread membership."""

import pytest

from threadline.services.errors import ConflictError, NotFound, ValidationError
from threadline.services.posts import PostService

MISSING_ID = "00000000-0000-4000-8000-000000000000"


@pytest.fixture()
def service(repo):
    return PostService(repo)


def test_root_post_opens_thread(repo, service, test_user) -> None:
    """A root post becomes the origin of a new thread."""
    post = service.create_post(test_user.id, "Opening words for a new conversation")

    thread = repo.find_thread(post.thread_id)
    assert thread.original_post_id == post.id
    assert thread.title == "Opening words for a new conversation"
    assert thread.post_count == 1
    assert thread.participant_count == 1
    assert thread.max_depth == 0
    assert thread.last_activity_at == post.published_at


def test_reply_joins_parent_thread(repo, service, other_user, test_post) -> None:
    """Replies share the parent's thread and refresh its metrics."""
    reply = service.create_post(other_user.id, "Agreed", parent_post_id=test_post.id)

    assert reply.thread_id == test_post.thread_id
    thread = repo.find_thread(test_post.thread_id)
    assert thread.post_count == 2
    assert thread.participant_count == 2
    assert thread.max_depth == 1
    assert thread.last_activity_at == reply.published_at
    assert repo.find_post(test_post.id).comment_count == 1


def test_long_title_is_truncated(repo, service, test_user) -> None:
    post = service.create_post(test_user.id, "x" * 250)
    assert len(repo.find_thread(post.thread_id).title) == 100


@pytest.mark.parametrize("content", ["", "   ", "y" * 281])
def test_content_limits(service, test_user, content) -> None:
    """Blank and over-long content is rejected."""
    with pytest.raises(ValidationError):
        service.create_post(test_user.id, content)


def test_missing_references(service, test_user) -> None:
    """Unknown authors, parents and repost targets are NotFound."""
    with pytest.raises(NotFound):
        service.create_post(MISSING_ID, "Hello")
    with pytest.raises(NotFound):
        service.create_post(test_user.id, "Hello", parent_post_id=MISSING_ID)
    with pytest.raises(NotFound):
        service.create_post(test_user.id, "Hello", repost_of_id=MISSING_ID)


def test_reply_to_locked_thread_conflicts(repo, service, other_user, test_post) -> None:
    with repo.unit_of_work():
        repo.update_thread_metrics(test_post.thread_id, {"is_locked": True})

    with pytest.raises(ConflictError):
        service.create_post(other_user.id, "Too late", parent_post_id=test_post.id)
    assert repo.find_thread(test_post.thread_id).post_count == 1


def test_promote_root_post_without_thread(repo, service, test_user) -> None:
    """Posts written before threading can be given a thread explicitly."""
    with repo.unit_of_work():
        legacy = repo.create_post(author_id=test_user.id, content="Legacy post")

    thread = service.promote_to_thread(legacy.id, title="Legacy")

    assert thread.original_post_id == legacy.id
    assert thread.title == "Legacy"
    assert repo.find_post(legacy.id).thread_id == thread.id
    with pytest.raises(ConflictError):
        service.promote_to_thread(legacy.id)


def test_promote_rejects_existing_thread_and_missing_post(service, test_post) -> None:
    with pytest.raises(ConflictError):
        service.promote_to_thread(test_post.id)
    with pytest.raises(NotFound):
        service.promote_to_thread(MISSING_ID)


def test_first_reply_threads_legacy_root(repo, service, test_user, other_user) -> None:
    """Replying to an unthreaded root opens its thread first."""
    with repo.unit_of_work():
        legacy = repo.create_post(author_id=test_user.id, content="Legacy post")

    reply = service.create_post(other_user.id, "Late reply", parent_post_id=legacy.id)

    thread = repo.find_thread_by_original_post(legacy.id)
    assert reply.thread_id == thread.id
    assert thread.post_count == 2


def test_reply_locks_ancestors_before_thread(
    mocker, repo, service, test_user, other_user, test_post
) -> None:
    """Ancestor post rows are locked in id order, then the thread row."""
    reply = service.create_post(other_user.id, "First reply", parent_post_id=test_post.id)
    locks = []
    lock_post = repo.lock_post
    lock_thread = repo.lock_thread

    def record_post(post_id):
        locks.append(("post", post_id))
        return lock_post(post_id)

    def record_thread(thread_id):
        locks.append(("thread", thread_id))
        return lock_thread(thread_id)

    mocker.patch.object(repo, "lock_post", side_effect=record_post)
    mocker.patch.object(repo, "lock_thread", side_effect=record_thread)

    service.create_post(test_user.id, "Nested reply", parent_post_id=reply.id)

    expected = [("post", post_id) for post_id in sorted([test_post.id, reply.id])]
    assert locks == expected + [("thread", test_post.thread_id)]
