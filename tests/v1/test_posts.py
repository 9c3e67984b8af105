# tests/v1/test_posts.py
"""Tests for post-related endpoints."""

from fastapi import status

MISSING_ID = "00000000-0000-4000-8000-000000000000"


def test_create_root_post(client, test_user) -> None:
    """Creating a root post opens a thread."""
    response = client.post(
        "/api/v1/posts",
        json={"author_id": test_user.id, "content": "Hello world"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["content"] == "Hello world"
    assert body["thread_id"] is not None
    assert body["parent_post_id"] is None


def test_create_reply(client, other_user, test_post) -> None:
    """Replies join the parent's thread."""
    response = client.post(
        "/api/v1/posts",
        json={
            "author_id": other_user.id,
            "content": "A reply",
            "parent_post_id": test_post.id,
        },
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["thread_id"] == test_post.thread_id


def test_create_post_errors(client, test_user) -> None:
    """Validation, missing references and over-long content map to HTTP errors."""
    response = client.post("/api/v1/posts", json={"author_id": test_user.id, "content": ""})
    assert response.status_code == 422

    response = client.post(
        "/api/v1/posts",
        json={"author_id": test_user.id, "content": "z" * 281},
    )
    assert response.status_code == 422

    response = client.post("/api/v1/posts", json={"author_id": MISSING_ID, "content": "Hi"})
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_get_post(client, test_post) -> None:
    response = client.get(f"/api/v1/posts/{test_post.id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == test_post.id

    response = client.get(f"/api/v1/posts/{MISSING_ID}")
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.get("/api/v1/posts/not-an-id")
    assert response.status_code == 422


def test_get_post_thread(client, make_post, other_user, test_post) -> None:
    """The thread opened by a post is returned in conversation order."""
    reply = make_post(other_user, "Reply", parent=test_post)

    response = client.get(f"/api/v1/posts/{test_post.id}/thread")

    assert response.status_code == status.HTTP_200_OK
    posts = response.json()["posts"]
    assert [(post["id"], post["depth"]) for post in posts] == [
        (test_post.id, 0),
        (reply.id, 1),
    ]


def test_promote_post_conflict(client, test_post) -> None:
    """A post that already owns a thread cannot be promoted again."""
    response = client.post(f"/api/v1/posts/{test_post.id}/thread")
    assert response.status_code == status.HTTP_409_CONFLICT
