"""
Tests for review submission, listing, moderation and the broadcast they trigger
"""

import asyncio

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.models import Review


class TestReviewSubmission:
    """Test suite for POST /api/places/{place_id}/reviews"""

    @pytest.mark.asyncio
    async def test_add_review_broadcasts(self, client: AsyncClient, test_place, notifier):
        response = await client.post(
            f"/api/places/{test_place.id}/reviews",
            json={"user": "Ploy", "rating": 5, "comment": "Great mango sticky rice"}
        )
        assert response.status_code == 201
        review = response.json()["data"]
        assert review["place_id"] == test_place.id
        assert review["rating"] == 5
        assert review["created_at"] is not None

        assert len(notifier.messages) == 1
        event, payload = notifier.messages[0]
        assert event == "review_updated"
        assert payload["placeId"] == test_place.id
        assert payload["reviewId"] == review["id"]
        assert payload["place"]["review_count"] == 1
        assert payload["place"]["average_rating"] == 5
        assert payload["place"]["openingHours"] == "Sat-Sun 09:00-18:00"

    @pytest.mark.asyncio
    async def test_average_and_order(self, client: AsyncClient, test_place):
        """Rating 4 then rating 2 averages to 3, listed newest first"""
        for rating in (4, 2):
            response = await client.post(
                f"/api/places/{test_place.id}/reviews",
                json={"user": "Guest", "rating": rating}
            )
            assert response.status_code == 201

        response = await client.get(f"/api/places/detail/{test_place.id}")
        data = response.json()["data"]
        assert data["average_rating"] == 3
        assert data["review_count"] == 2

        response = await client.get(f"/api/reviews/place/{test_place.id}")
        assert response.status_code == 200
        assert [r["rating"] for r in response.json()["data"]] == [2, 4]

    @pytest.mark.asyncio
    async def test_comment_is_optional(self, client: AsyncClient, test_place):
        response = await client.post(
            f"/api/places/{test_place.id}/reviews",
            json={"user": "Guest", "rating": "3"}
        )
        assert response.status_code == 201
        assert response.json()["data"]["comment"] == ""
        assert response.json()["data"]["rating"] == 3

    @pytest.mark.asyncio
    async def test_missing_place_fails_without_broadcast(
        self, client: AsyncClient, db_session, stations, notifier
    ):
        response = await client.post(
            "/api/places/999/reviews",
            json={"user": "Guest", "rating": 4, "comment": "?"}
        )
        assert response.status_code == 404
        assert "error" in response.json()
        assert notifier.messages == []
        assert await db_session.scalar(select(func.count(Review.id))) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 6, "five"])
    async def test_rating_out_of_range(self, client: AsyncClient, test_place, notifier, rating):
        response = await client.post(
            f"/api/places/{test_place.id}/reviews",
            json={"user": "Guest", "rating": rating}
        )
        assert response.status_code == 400
        assert "rating" in response.json()["error"]
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_blank_user_rejected(self, client: AsyncClient, test_place):
        response = await client.post(
            f"/api/places/{test_place.id}/reviews",
            json={"user": "   ", "rating": 4}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_concurrent_submissions_are_all_stored(self, client: AsyncClient, db_session, test_place):
        """Ten parallel creates produce ten rows and a count of ten"""
        responses = await asyncio.gather(*[
            client.post(
                f"/api/places/{test_place.id}/reviews",
                json={"user": f"Rider {i}", "rating": (i % 5) + 1}
            )
            for i in range(10)
        ])
        assert all(r.status_code == 201 for r in responses)
        assert len({r.json()["data"]["id"] for r in responses}) == 10

        stored = await db_session.scalar(
            select(func.count(Review.id)).where(Review.place_id == test_place.id)
        )
        assert stored == 10

        response = await client.get(f"/api/places/detail/{test_place.id}")
        assert response.json()["data"]["review_count"] == 10
        assert response.json()["data"]["average_rating"] == 3


class TestReviewModeration:
    """Test suite for review listing and deletion"""

    @pytest.mark.asyncio
    async def test_list_reviews_for_unknown_place(self, client: AsyncClient, stations):
        response = await client.get("/api/reviews/place/999")
        assert response.status_code == 200
        assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_delete_review(self, client: AsyncClient, test_place, test_reviews, notifier):
        target = test_reviews[0]
        response = await client.delete(f"/api/reviews/{target.id}")
        assert response.status_code == 200
        assert response.json()["data"] == {"changes": 1}

        response = await client.get(f"/api/reviews/place/{test_place.id}")
        assert [r["id"] for r in response.json()["data"]] == [test_reviews[1].id]

        # Open detail views are told to drop the review
        assert len(notifier.messages) == 1
        event, payload = notifier.messages[0]
        assert event == "review_updated"
        assert payload["placeId"] == test_place.id
        assert payload["place"]["review_count"] == 1

    @pytest.mark.asyncio
    async def test_delete_missing_review(self, client: AsyncClient, stations, notifier):
        response = await client.delete("/api/reviews/999")
        assert response.status_code == 404
        assert response.json()["error"] == "Review with id 999 not found"
        assert notifier.messages == []
