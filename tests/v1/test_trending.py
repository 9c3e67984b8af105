# tests/v1/test_trending.py
"""Tests for trending endpoints."""

from fastapi import status


def test_trending_posts(client, make_user, test_post, make_post, test_user) -> None:
    """Posts with more recent likes rank first."""
    other = make_post(test_user, "Other")
    fans = [make_user() for _ in range(2)]
    for fan in fans:
        client.post(
            f"/api/v1/posts/{test_post.id}/reactions",
            json={"user_id": fan.id, "type": "LIKE"},
        )
    client.post(
        f"/api/v1/posts/{other.id}/reactions",
        json={"user_id": fans[0].id, "type": "REPOST"},
    )

    response = client.get("/api/v1/trending/posts", params={"hours_back": 2, "limit": 5})

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert [item["post_id"] for item in body] == [test_post.id, other.id]
    assert body[0]["recent_reactions"] == 2
    assert body[0]["reaction_velocity"] == 1.0


def test_trending_rejects_non_positive_window(client) -> None:
    response = client.get("/api/v1/trending/posts", params={"hours_back": 0})
    assert response.status_code == 422
