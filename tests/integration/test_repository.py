"""리포지토리 통합 테스트 (PostgreSQL 컨테이너)"""

from datetime import timedelta

import pytest

from app.domains.featured.models import FeaturedSlot
from app.domains.featured.repository import FeaturedSlotRepository
from app.domains.lists.models import (
    Bookmark,
    Category,
    CommentStatus,
    CreatorRanking,
    CuratedList,
    Follow,
    ListComment,
    ListItem,
    ListLike,
)
from app.domains.ranking.repository import EngagementRepository
from app.domains.ranking.types import EngagementKind
from app.domains.users.models import User, UserRole

pytestmark = pytest.mark.integration


async def _seed(session, now):
    """카테고리 2개, 큐레이터 2명, 일반 사용자 2명, 리스트 4개"""
    session.add_all(
        [
            Category(id=1, slug="books", name="Books"),
            Category(id=2, slug="music", name="Music"),
            User(id=10, role=UserRole.CURATOR.value, name="Kim", curator_level="PRO"),
            User(id=20, role=UserRole.CURATOR.value, name="Lee"),
            User(id=30, role=UserRole.USER.value, name="Park"),
            User(id=40, role=UserRole.USER.value, name="Choi"),
        ]
    )
    await session.flush()

    created = now - timedelta(days=3)
    session.add_all(
        [
            CuratedList(
                id=1, user_id=10, category_id=1, title="Novels", slug="novels",
                save_count=30, like_count=60, tags=["fiction", "korean"],
                created_at=created,
            ),
            CuratedList(
                id=2, user_id=10, category_id=1, title="Essays", slug="essays",
                save_count=10, like_count=5, tags=["fiction"], created_at=created,
            ),
            CuratedList(
                id=3, user_id=20, category_id=2, title="Jazz", slug="jazz",
                save_count=20, created_at=created,
            ),
            CuratedList(
                id=4, user_id=30, category_id=1, title="Mine", slug="mine",
                save_count=99, created_at=created,
            ),
        ]
    )
    await session.flush()

    session.add_all(
        [
            ListItem(list_id=1, title="Pachinko"),
            ListItem(list_id=1, title="Human Acts"),
            Bookmark(user_id=30, list_id=1, created_at=now - timedelta(days=1)),
            Bookmark(user_id=40, list_id=1, created_at=now - timedelta(hours=2)),
            Bookmark(user_id=30, list_id=3, created_at=now - timedelta(days=1)),
            Bookmark(user_id=20, list_id=1, created_at=now - timedelta(days=20)),
            ListLike(user_id=30, list_id=1, created_at=now - timedelta(days=2)),
            ListComment(user_id=30, list_id=1, created_at=now - timedelta(days=1)),
            ListComment(
                user_id=40, list_id=1, is_approved=False,
                created_at=now - timedelta(days=1),
            ),
            ListComment(
                user_id=40, list_id=1, status=CommentStatus.HIDDEN,
                created_at=now - timedelta(days=1),
            ),
            Follow(follower_id=30, following_id=20),
            CreatorRanking(user_id=10, influence_score=12.5, momentum_score=3.0),
        ]
    )
    await session.flush()


class TestEngagementRepository:
    """EngagementRepository 통합 테스트"""

    @pytest.mark.asyncio
    async def test_window_counts(self, db_session, ctx, now):
        await _seed(db_session, now)
        repository = EngagementRepository(db_session)
        since = ctx.since(7)

        saves = await repository.get_engagement_counts(
            ctx, [1, 2, 3], EngagementKind.SAVE, since
        )
        comments = await repository.get_engagement_counts(
            ctx, [1], EngagementKind.COMMENT, since
        )
        last = await repository.get_last_activity_timestamps(
            ctx, [1], EngagementKind.SAVE, since
        )

        assert saves == {1: 2, 3: 1}
        assert comments == {1: 1}
        assert last[1] == now - timedelta(hours=2)

    @pytest.mark.asyncio
    async def test_candidates_exclude_user_role_lists(self, db_session, ctx, now):
        await _seed(db_session, now)
        repository = EngagementRepository(db_session)

        candidates = await repository.get_category_candidates(ctx, [1, 2], 10)
        top = await repository.get_top_saved_lists(ctx, 10)

        assert [c.id for c in candidates] == [1, 2, 3]
        assert [s.id for s in top] == [1, 3, 2]
        assert candidates[0].category_slug == "books"

    @pytest.mark.asyncio
    async def test_category_candidates_per_category_limit(
        self, db_session, ctx, now
    ):
        await _seed(db_session, now)

        candidates = await EngagementRepository(db_session).get_category_candidates(
            ctx, [1], 1
        )

        assert [c.id for c in candidates] == [1]

    @pytest.mark.asyncio
    async def test_similarity_queries(self, db_session, ctx, now):
        await _seed(db_session, now)
        repository = EngagementRepository(db_session)

        source = await repository.get_similarity_source(ctx, 1)
        candidates = await repository.get_similarity_candidates(ctx, source, 10)
        co_saved = await repository.get_co_saved_lists(ctx, 1, 10)

        assert source.item_titles == ("Pachinko", "Human Acts")
        assert source.tags == ("fiction", "korean")
        assert [c.id for c in candidates] == [2]
        assert await repository.count_distinct_savers(ctx, 1) == 3
        assert co_saved == [(3, 1)]

    @pytest.mark.asyncio
    async def test_discovery_queries(self, db_session, ctx, now):
        await _seed(db_session, now)
        repository = EngagementRepository(db_session)

        activity = await repository.get_user_category_activity(ctx, 30)
        creator_ids = await repository.get_creator_ids(ctx)
        followed = await repository.get_followed_creator_ids(ctx, 30)
        interactions = await repository.get_user_creator_interactions(ctx, 30)
        rankings = await repository.get_creator_ranking_snapshots(ctx, [10, 20])

        assert activity["books"].saves == 1
        assert activity["books"].likes == 1
        assert activity["books"].lists == 1
        assert activity["music"].saves == 1
        assert creator_ids == [10, 20, 30]
        assert followed == {20}
        assert interactions[10].saves == 1
        assert interactions[10].likes == 1
        assert set(rankings) == {10}
        assert rankings[10].influence_score == 12.5

    @pytest.mark.asyncio
    async def test_creator_profiles(self, db_session, ctx, now):
        await _seed(db_session, now)

        profiles = await EngagementRepository(db_session).get_creator_profiles(
            ctx, [10, 20, 999]
        )

        assert set(profiles) == {10, 20}
        kim = profiles[10]
        assert kim.list_count == 2
        assert kim.total_likes == 65
        assert kim.viral_count == 1
        assert kim.curator_level == "PRO"
        assert [c.slug for c in kim.top_categories] == ["books"]
        assert profiles[20].curator_level == "EXPLORER"


class TestFeaturedSlotRepository:
    """FeaturedSlotRepository 통합 테스트"""

    @pytest.mark.asyncio
    async def test_snapshot_upsert_keeps_baseline_and_raises_peak(
        self, db_session, ctx, now
    ):
        await _seed(db_session, now)
        db_session.add(
            FeaturedSlot(id=1, list_id=1, start_at=now - timedelta(days=1))
        )
        await db_session.flush()
        repository = FeaturedSlotRepository(db_session)

        assert await repository.upsert_featured_slot_score_snapshot(
            ctx, 1, baseline_score=50.0, peak_score=50.0, baseline_saves=30
        )
        await repository.upsert_featured_slot_score_snapshot(
            ctx, 1, baseline_score=80.0, peak_score=40.0
        )
        await repository.upsert_featured_slot_score_snapshot(ctx, 1, peak_score=70.0)

        slot = await repository.get_slot(ctx, 1)
        assert slot.baseline_score == 50.0
        assert slot.baseline_saves == 30
        assert slot.peak_score == 70.0
        assert slot.list_title == "Novels"
        assert slot.category_name == "Books"

    @pytest.mark.asyncio
    async def test_ended_slot_not_updated(self, db_session, ctx, now):
        await _seed(db_session, now)
        db_session.add(
            FeaturedSlot(
                id=2,
                list_id=3,
                start_at=now - timedelta(days=10),
                end_at=now - timedelta(days=3),
            )
        )
        await db_session.flush()
        repository = FeaturedSlotRepository(db_session)

        updated = await repository.upsert_featured_slot_score_snapshot(
            ctx, 2, peak_score=10.0
        )

        assert updated is False
        assert (await repository.get_slot(ctx, 2)).peak_score is None

    @pytest.mark.asyncio
    async def test_schedule_queries(self, db_session, ctx, now):
        await _seed(db_session, now)
        db_session.add_all(
            [
                FeaturedSlot(
                    id=1,
                    list_id=1,
                    start_at=now - timedelta(days=10),
                    end_at=now - timedelta(days=3),
                ),
                FeaturedSlot(id=2, list_id=2, start_at=now - timedelta(days=1)),
                FeaturedSlot(id=3, list_id=3, start_at=now + timedelta(days=2)),
            ]
        )
        await db_session.flush()
        repository = FeaturedSlotRepository(db_session)

        active = await repository.get_active_slots(ctx)
        recent = await repository.get_recent_slots(ctx, 4)
        scheduled = await repository.get_scheduled_list_ids(ctx)
        last = await repository.get_last_featured_at(ctx)

        assert [s.id for s in active] == [2]
        assert [s.id for s in recent] == [2, 1]
        assert scheduled == {2, 3}
        assert last[1] == now - timedelta(days=3)
