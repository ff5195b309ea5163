"""
RoadRater Backend — Persistence Integration Tests
===================================================

What:  Services running against the real gateway over in-memory SQLite.
How:   `sqlite_database` builds the schema from the models; every test
       starts from empty tables.

What we test:
    ✅ Submission returns the average including the new rating
    ✅ Unknown segment: nothing is written
    ✅ A failure inside a transaction rolls back earlier statements
    ✅ Feed ordering and statistics
    ✅ Top 5 ranks unrated segments last
    ✅ Unique usernames
    ✅ Only duplicate keys map to 409; FK and CHECK failures are internal
    ✅ Ids beyond the INTEGER range are rejected with 400 before any query
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, insert, select

from roadrater.exceptions import ConflictError, DatabaseError, NotFoundError
from roadrater.models import Rating, RoadSegment, User
from roadrater.services.auth_service import AuthService
from roadrater.services.rating_service import RatingService
from roadrater.services.road_service import RoadService

BASE_TIME = datetime(2025, 12, 1, 12, 0, tzinfo=timezone.utc)


async def _add_segment(db, name):
    row = await db.fetch_one(insert(RoadSegment).values(name=name).returning(RoadSegment.id))
    return row["id"]


async def _add_user(db, username):
    row = await db.fetch_one(
        insert(User).values(username=username, password="not-a-real-hash").returning(User.id)
    )
    return row["id"]


async def _add_rating(db, segment_id, user_id, score, minutes=0):
    await db.fetch_one(
        insert(Rating)
        .values(
            segment_id=segment_id,
            user_id=user_id,
            rating=score,
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
        .returning(Rating.id)
    )


async def _rating_count(db):
    return await db.fetch_value(select(func.count(Rating.id)))


class TestSubmitRating:

    @pytest.mark.asyncio
    async def test_new_average_includes_submission(self, sqlite_database):
        segment_id = await _add_segment(sqlite_database, "Main St Segment")
        user_id = await _add_user(sqlite_database, "freshroadie1")
        await _add_rating(sqlite_database, segment_id, user_id, 4)
        await _add_rating(sqlite_database, segment_id, user_id, 5)

        result = await RatingService(sqlite_database).submit_rating(segment_id, user_id, 3, "  Bumpy  ")

        assert result.new_average == 4.0
        assert result.rating.comment == "Bumpy"
        assert result.segment.name == "Main St Segment"
        assert await _rating_count(sqlite_database) == 3

    @pytest.mark.asyncio
    async def test_unknown_segment_writes_nothing(self, sqlite_database):
        user_id = await _add_user(sqlite_database, "freshroadie1")

        with pytest.raises(NotFoundError):
            await RatingService(sqlite_database).submit_rating(404, user_id, 3)

        assert await _rating_count(sqlite_database) == 0

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_on_error(self, sqlite_database):
        segment_id = await _add_segment(sqlite_database, "Main St Segment")
        user_id = await _add_user(sqlite_database, "freshroadie1")

        with pytest.raises(NotFoundError):
            async with sqlite_database.transaction() as tx:
                await tx.fetch_one(
                    insert(Rating)
                    .values(segment_id=segment_id, user_id=user_id, rating=5)
                    .returning(Rating.id)
                )
                raise NotFoundError("Road segment not found")

        assert await _rating_count(sqlite_database) == 0


class TestRatingFeed:

    @pytest.mark.asyncio
    async def test_newest_first_with_statistics(self, sqlite_database):
        segment_id = await _add_segment(sqlite_database, "Main St Segment")
        user_id = await _add_user(sqlite_database, "freshroadie1")
        await _add_rating(sqlite_database, segment_id, user_id, 2, minutes=10)
        await _add_rating(sqlite_database, segment_id, user_id, 5, minutes=30)
        await _add_rating(sqlite_database, segment_id, user_id, 4, minutes=20)

        feed = await RatingService(sqlite_database).list_ratings(segment_id)

        assert [r.rating for r in feed.ratings] == [5, 4, 2]
        assert feed.statistics.count == 3
        assert feed.statistics.average == 3.67
        assert feed.statistics.min == 2
        assert feed.statistics.max == 5

    @pytest.mark.asyncio
    async def test_empty_segment(self, sqlite_database):
        segment_id = await _add_segment(sqlite_database, "Quiet Lane")

        feed = await RatingService(sqlite_database).list_ratings(segment_id)

        assert feed.ratings == []
        assert feed.statistics.count == 0
        assert feed.statistics.average == 0.0


class TestRoads:

    @pytest.mark.asyncio
    async def test_top5_ranks_unrated_last(self, sqlite_database):
        user_id = await _add_user(sqlite_database, "freshroadie1")
        unrated = await _add_segment(sqlite_database, "Unrated Road")
        good = await _add_segment(sqlite_database, "Good Road")
        best = await _add_segment(sqlite_database, "Best Road")
        await _add_rating(sqlite_database, good, user_id, 4)
        await _add_rating(sqlite_database, best, user_id, 5)

        top = await RoadService(sqlite_database).top_roads()

        assert [road.id for road in top.roads] == [best, good, unrated]
        assert top.roads[2].rating_count == 0
        assert top.roads[2].average_rating == 0.0

    @pytest.mark.asyncio
    async def test_top5_is_capped(self, sqlite_database):
        for i in range(7):
            await _add_segment(sqlite_database, f"Segment {i}")

        top = await RoadService(sqlite_database).top_roads()

        assert top.count == 5

    @pytest.mark.asyncio
    async def test_paging_and_detail(self, sqlite_database):
        user_id = await _add_user(sqlite_database, "freshroadie1")
        ids = [await _add_segment(sqlite_database, f"Segment {i}") for i in range(3)]
        await _add_rating(sqlite_database, ids[1], user_id, 2)
        await _add_rating(sqlite_database, ids[1], user_id, 5)

        page = await RoadService(sqlite_database).list_roads_page(page=2, limit=2)
        assert [road.id for road in page.roads] == [ids[2]]
        assert page.total == 3

        detail = await RoadService(sqlite_database).get_road(ids[1])
        assert detail.rating_count == 2
        assert detail.average_rating == 3.5
        assert (detail.min_rating, detail.max_rating) == (2, 5)


class TestAccounts:

    @pytest.mark.asyncio
    async def test_register_then_login(self, sqlite_database):
        service = AuthService(sqlite_database, "integration-secret")

        created = await service.register("freshroadie1", "Password123")
        token = await service.login("freshroadie1", "Password123")
        profile = await service.get_user(created.id)

        assert token.token
        assert profile.username == "freshroadie1"

    @pytest.mark.asyncio
    async def test_duplicate_username(self, sqlite_database):
        service = AuthService(sqlite_database, "integration-secret")
        await service.register("freshroadie1", "Password123")

        with pytest.raises(ConflictError, match="Username already exists"):
            await service.register("freshroadie1", "Password456")


class TestConstraintTranslation:

    @pytest.mark.asyncio
    async def test_foreign_key_violation_is_internal(self, sqlite_database):
        segment_id = await _add_segment(sqlite_database, "Main St Segment")

        with pytest.raises(DatabaseError):
            await RatingService(sqlite_database).submit_rating(segment_id, 999, 4)

        assert await _rating_count(sqlite_database) == 0

    @pytest.mark.asyncio
    async def test_check_violation_is_internal(self, sqlite_database):
        segment_id = await _add_segment(sqlite_database, "Main St Segment")
        user_id = await _add_user(sqlite_database, "freshroadie1")

        with pytest.raises(DatabaseError):
            await _add_rating(sqlite_database, segment_id, user_id, 9)

    @pytest.mark.asyncio
    async def test_unique_violation_is_conflict(self, sqlite_database):
        await _add_user(sqlite_database, "freshroadie1")

        with pytest.raises(ConflictError):
            await _add_user(sqlite_database, "freshroadie1")


class TestHttpEdgeCases:
    """Full app over the SQLite gateway."""

    @pytest.mark.asyncio
    async def test_rating_for_deleted_account_is_500(self, sqlite_client, sqlite_database, auth_header):
        segment_id = await _add_segment(sqlite_database, "Main St Segment")

        response = await sqlite_client.post(
            "/ratings", json={"segmentId": segment_id, "rating": 4}, headers=auth_header(999)
        )

        assert response.status_code == 500
        assert response.json()["error"] != "Conflicting record"
        assert await _rating_count(sqlite_database) == 0

    @pytest.mark.asyncio
    async def test_duplicate_registration_is_409(self, sqlite_client):
        body = {"username": "freshroadie1", "password": "Password123"}

        first = await sqlite_client.post("/auth/register", json=body)
        second = await sqlite_client.post("/auth/register", json=body)

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"] == "Username already exists"

    @pytest.mark.asyncio
    async def test_overlong_username_is_400(self, sqlite_client):
        response = await sqlite_client.post(
            "/auth/register", json={"username": "a" * 51, "password": "Password123"}
        )

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "username"}

    @pytest.mark.asyncio
    async def test_feed_with_oversized_id_is_400(self, sqlite_client):
        response = await sqlite_client.get("/ratings/99999999999999999999")

        assert response.status_code == 400
        assert response.json()["error"] == "segmentId must be a positive integer"

    @pytest.mark.asyncio
    async def test_road_with_oversized_id_is_400(self, sqlite_client):
        response = await sqlite_client.get("/roads/99999999999999999999")

        assert response.status_code == 400
        assert response.json()["error"] == "Road id must be a positive integer"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("segment_id", [1e30, 99999999999999999999, "1e3"])
    async def test_submit_with_oversized_or_float_syntax_id_is_400(
        self, sqlite_client, sqlite_database, auth_header, segment_id
    ):
        user_id = await _add_user(sqlite_database, "freshroadie1")

        response = await sqlite_client.post(
            "/ratings", json={"segmentId": segment_id, "rating": 5}, headers=auth_header(user_id)
        )

        assert response.status_code == 400
        assert response.json()["details"] == ["segmentId must be a positive integer"]
        assert await _rating_count(sqlite_database) == 0

    @pytest.mark.asyncio
    async def test_huge_page_returns_empty_page(self, sqlite_client, sqlite_database):
        await _add_segment(sqlite_database, "Main St Segment")

        response = await sqlite_client.get("/roads", params={"page": "99999999999999999999"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["roads"] == []
        assert data["total"] == 1
