"""Ranking 도메인 리포지토리

EngagementStore 인터페이스의 SQLAlchemy 구현입니다.
모든 조회는 후보 id 집합 단위의 GROUP BY 쿼리로 수행하며,
QueryContext 데드라인을 쿼리 단위로 적용합니다.
"""

import asyncio
from collections import defaultdict
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import Select, case, distinct, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
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
from app.domains.ranking.exceptions import AggregationFailedException
from app.domains.ranking.types import (
    CategoryActivity,
    CategoryInfo,
    CreatorInteraction,
    CreatorPolicy,
    CreatorProfile,
    CreatorRankingSnapshot,
    EngagementKind,
    EntitySnapshot,
    QueryContext,
)
from app.domains.users.models import User

logger = get_logger(__name__)

UNCATEGORIZED_SLUG = "other"
VIRAL_LIKE_THRESHOLD = 50
TOP_CATEGORY_COUNT = 3
DEFAULT_CURATOR_LEVEL = "EXPLORER"

_EVENT_MODELS = {
    EngagementKind.SAVE: Bookmark,
    EngagementKind.LIKE: ListLike,
    EngagementKind.COMMENT: ListComment,
}


class QueryRunner:
    """데드라인과 에러 변환을 적용하는 쿼리 실행기

    남은 시간이 없으면 쿼리를 보내지 않고, 스토리지 오류와 타임아웃은
    AggregationFailedException으로 변환합니다.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _execute(self, ctx: QueryContext, stmt: Any, operation: str) -> Any:
        remaining = ctx.remaining()
        if remaining is not None and remaining <= 0:
            logger.error(f"Deadline exceeded before query: {operation}")
            raise AggregationFailedException(operation, "deadline exceeded")

        try:
            if remaining is None:
                return await self.session.execute(stmt)
            return await asyncio.wait_for(
                self.session.execute(stmt), timeout=remaining
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Query timed out: {operation} ({remaining:.2f}s)")
            raise AggregationFailedException(operation, "deadline exceeded") from e
        except SQLAlchemyError as e:
            logger.error(f"Query failed: {operation} - {e}")
            raise AggregationFailedException(operation, type(e).__name__) from e


class EngagementRepository(QueryRunner):
    """참여 데이터 집계 리포지토리"""

    def __init__(
        self, session: AsyncSession, policy: Optional[CreatorPolicy] = None
    ):
        super().__init__(session)
        self.policy = policy or CreatorPolicy()

    # ------------------------------------------------------------------
    # 공통 조건 / 스냅샷 변환
    # ------------------------------------------------------------------

    def _eligible_conditions(self) -> tuple[Any, ...]:
        """Trending/유사 리스트 후보 조건 (활성, 공개, 크리에이터 자격)"""
        creators = select(User.id).where(
            User.role.notin_(sorted(self.policy.excluded_roles))
        )
        return (
            CuratedList.is_active.is_(True),
            CuratedList.is_public.is_(True),
            CuratedList.deleted_at.is_(None),
            CuratedList.user_id.in_(creators),
        )

    @staticmethod
    def _snapshot_query() -> Select:
        return select(CuratedList, Category.slug, Category.name).outerjoin(
            Category, CuratedList.category_id == Category.id
        )

    async def _to_snapshots(
        self,
        ctx: QueryContext,
        rows: Sequence[Any],
        with_items: bool = False,
    ) -> list[EntitySnapshot]:
        item_titles: dict[int, list[str]] = defaultdict(list)
        if with_items and rows:
            ids = [row[0].id for row in rows]
            result = await self._execute(
                ctx,
                select(ListItem.list_id, ListItem.title)
                .where(ListItem.list_id.in_(ids))
                .order_by(ListItem.list_id, ListItem.id),
                "list_item_titles",
            )
            for list_id, title in result.all():
                item_titles[list_id].append(title)

        return [
            EntitySnapshot(
                id=lst.id,
                title=lst.title,
                slug=lst.slug,
                creator_id=lst.user_id,
                category_id=lst.category_id,
                category_slug=category_slug,
                category_name=category_name,
                save_count=lst.save_count,
                like_count=lst.like_count,
                view_count=lst.view_count,
                item_count=lst.item_count,
                created_at=lst.created_at,
                cover_image=lst.cover_image,
                tags=tuple(lst.tags or ()),
                item_titles=tuple(item_titles.get(lst.id, ())),
            )
            for lst, category_slug, category_name in rows
        ]

    # ------------------------------------------------------------------
    # 윈도우 집계
    # ------------------------------------------------------------------

    def _event_window(
        self,
        columns: Sequence[Any],
        kind: EngagementKind,
        entity_ids: Sequence[int],
        since: datetime,
        until: datetime,
    ) -> Select:
        model = _EVENT_MODELS[kind]
        stmt = select(*columns).where(
            model.list_id.in_(entity_ids),
            model.created_at >= since,
            model.created_at <= until,
        )
        if kind == EngagementKind.COMMENT:
            stmt = stmt.where(
                ListComment.status == CommentStatus.ACTIVE,
                ListComment.is_approved.is_(True),
            )
        return stmt.group_by(model.list_id)

    async def get_engagement_counts(
        self,
        ctx: QueryContext,
        entity_ids: Sequence[int],
        kind: EngagementKind,
        since: datetime,
    ) -> dict[int, int]:
        """윈도우 내 이벤트 수 (list_id별)"""
        if not entity_ids:
            return {}

        model = _EVENT_MODELS[kind]
        stmt = self._event_window(
            (model.list_id, func.count(model.id)),
            kind,
            entity_ids,
            since,
            ctx.now,
        )
        result = await self._execute(ctx, stmt, f"count_{kind.value}s")
        return {list_id: count for list_id, count in result.all()}

    async def get_last_activity_timestamps(
        self,
        ctx: QueryContext,
        entity_ids: Sequence[int],
        kind: EngagementKind,
        since: datetime,
    ) -> dict[int, datetime]:
        """윈도우 내 마지막 이벤트 시각 (list_id별)"""
        if not entity_ids:
            return {}

        model = _EVENT_MODELS[kind]
        stmt = self._event_window(
            (model.list_id, func.max(model.created_at)),
            kind,
            entity_ids,
            since,
            ctx.now,
        )
        result = await self._execute(ctx, stmt, f"last_{kind.value}_at")
        return {list_id: last for list_id, last in result.all()}

    async def get_entity_snapshots(
        self, ctx: QueryContext, entity_ids: Sequence[int]
    ) -> dict[int, EntitySnapshot]:
        if not entity_ids:
            return {}

        stmt = self._snapshot_query().where(
            CuratedList.id.in_(entity_ids), CuratedList.deleted_at.is_(None)
        )
        result = await self._execute(ctx, stmt, "entity_snapshots")
        snapshots = await self._to_snapshots(ctx, result.all())
        return {s.id: s for s in snapshots}

    # ------------------------------------------------------------------
    # Trending 후보
    # ------------------------------------------------------------------

    async def list_active_categories(
        self, ctx: QueryContext
    ) -> list[CategoryInfo]:
        stmt = (
            select(Category)
            .where(Category.is_active.is_(True), Category.deleted_at.is_(None))
            .order_by(Category.id)
        )
        result = await self._execute(ctx, stmt, "active_categories")
        return [
            CategoryInfo(id=c.id, slug=c.slug, name=c.name, icon=c.icon)
            for c in result.scalars().all()
        ]

    async def get_category_candidates(
        self,
        ctx: QueryContext,
        category_ids: Sequence[int],
        per_category: int,
    ) -> list[EntitySnapshot]:
        """카테고리별 저장 수 상위 per_category개 (단일 윈도우 쿼리)"""
        if not category_ids:
            return []

        ranked = (
            select(
                CuratedList.id.label("id"),
                func.row_number()
                .over(
                    partition_by=CuratedList.category_id,
                    order_by=(CuratedList.save_count.desc(), CuratedList.id),
                )
                .label("rn"),
            )
            .where(CuratedList.category_id.in_(category_ids))
            .where(*self._eligible_conditions())
            .subquery()
        )
        stmt = (
            self._snapshot_query()
            .join(ranked, ranked.c.id == CuratedList.id)
            .where(ranked.c.rn <= per_category)
            .order_by(
                CuratedList.category_id,
                CuratedList.save_count.desc(),
                CuratedList.id,
            )
        )
        result = await self._execute(ctx, stmt, "category_candidates")
        return await self._to_snapshots(ctx, result.all())

    async def get_lists_saved_since(
        self, ctx: QueryContext, since: datetime, limit: int
    ) -> list[EntitySnapshot]:
        recently_saved = select(Bookmark.list_id).where(
            Bookmark.created_at >= since, Bookmark.created_at <= ctx.now
        )
        stmt = (
            self._snapshot_query()
            .where(*self._eligible_conditions())
            .where(CuratedList.id.in_(recently_saved))
            .order_by(CuratedList.save_count.desc(), CuratedList.id)
            .limit(limit)
        )
        result = await self._execute(ctx, stmt, "lists_saved_since")
        return await self._to_snapshots(ctx, result.all())

    async def get_top_saved_lists(
        self,
        ctx: QueryContext,
        limit: int,
        category_id: Optional[int] = None,
        exclude_ids: Sequence[int] = (),
    ) -> list[EntitySnapshot]:
        """저장 수 상위 리스트"""
        stmt = self._snapshot_query().where(*self._eligible_conditions())
        if category_id is not None:
            stmt = stmt.where(CuratedList.category_id == category_id)
        if exclude_ids:
            stmt = stmt.where(CuratedList.id.notin_(exclude_ids))
        stmt = stmt.order_by(CuratedList.save_count.desc(), CuratedList.id).limit(
            limit
        )

        result = await self._execute(ctx, stmt, "top_saved_lists")
        return await self._to_snapshots(ctx, result.all())

    # ------------------------------------------------------------------
    # 유사 리스트
    # ------------------------------------------------------------------

    async def get_similarity_source(
        self, ctx: QueryContext, list_id: int
    ) -> Optional[EntitySnapshot]:
        stmt = self._snapshot_query().where(
            CuratedList.id == list_id, CuratedList.deleted_at.is_(None)
        )
        result = await self._execute(ctx, stmt, "similarity_source")
        snapshots = await self._to_snapshots(ctx, result.all(), with_items=True)
        return snapshots[0] if snapshots else None

    async def count_distinct_savers(
        self, ctx: QueryContext, list_id: int
    ) -> int:
        stmt = select(func.count(distinct(Bookmark.user_id))).where(
            Bookmark.list_id == list_id
        )
        result = await self._execute(ctx, stmt, "count_distinct_savers")
        return int(result.scalar_one() or 0)

    async def get_co_saved_lists(
        self, ctx: QueryContext, list_id: int, limit: int
    ) -> list[tuple[int, int]]:
        """기준 리스트 저장자들이 함께 저장한 리스트와 겹치는 저장자 수"""
        savers = select(Bookmark.user_id).where(Bookmark.list_id == list_id)
        overlap = func.count(distinct(Bookmark.user_id)).label("overlap")
        stmt = (
            select(Bookmark.list_id, overlap)
            .where(Bookmark.user_id.in_(savers), Bookmark.list_id != list_id)
            .group_by(Bookmark.list_id)
            .order_by(overlap.desc(), Bookmark.list_id)
            .limit(limit)
        )
        result = await self._execute(ctx, stmt, "co_saved_lists")
        return [(row[0], int(row[1])) for row in result.all()]

    async def get_lists_by_ids(
        self, ctx: QueryContext, list_ids: Sequence[int]
    ) -> list[EntitySnapshot]:
        if not list_ids:
            return []

        stmt = (
            self._snapshot_query()
            .where(CuratedList.id.in_(list_ids))
            .where(*self._eligible_conditions())
            .order_by(CuratedList.id)
        )
        result = await self._execute(ctx, stmt, "lists_by_ids")
        return await self._to_snapshots(ctx, result.all(), with_items=True)

    async def get_similarity_candidates(
        self,
        ctx: QueryContext,
        source: EntitySnapshot,
        limit: int,
        exclude_ids: Sequence[int] = (),
    ) -> list[EntitySnapshot]:
        """같은 카테고리이거나 태그가 하나 이상 겹치는 후보"""
        conditions = []
        if source.category_id is not None:
            conditions.append(CuratedList.category_id == source.category_id)
        if source.tags:
            conditions.append(CuratedList.tags.overlap(list(source.tags)))
        if not conditions:
            return []

        excluded = {source.id, *exclude_ids}
        stmt = (
            self._snapshot_query()
            .where(*self._eligible_conditions())
            .where(or_(*conditions), CuratedList.id.notin_(excluded))
            .order_by(CuratedList.save_count.desc(), CuratedList.id)
            .limit(limit)
        )
        result = await self._execute(ctx, stmt, "similarity_candidates")
        return await self._to_snapshots(ctx, result.all(), with_items=True)

    # ------------------------------------------------------------------
    # 크리에이터 추천
    # ------------------------------------------------------------------

    async def _category_counts_via(
        self, ctx: QueryContext, model: Any, user_id: int, operation: str
    ) -> dict[str, int]:
        stmt = (
            select(Category.slug, func.count(model.id))
            .select_from(model)
            .join(CuratedList, model.list_id == CuratedList.id)
            .join(Category, CuratedList.category_id == Category.id)
            .where(model.user_id == user_id)
            .group_by(Category.slug)
        )
        result = await self._execute(ctx, stmt, operation)
        return {slug: count for slug, count in result.all()}

    async def get_user_category_activity(
        self, ctx: QueryContext, user_id: int
    ) -> dict[str, CategoryActivity]:
        """카테고리별 사용자 활동 (저장, 본인 공개 리스트, 좋아요)"""
        saves = await self._category_counts_via(
            ctx, Bookmark, user_id, "user_category_saves"
        )
        likes = await self._category_counts_via(
            ctx, ListLike, user_id, "user_category_likes"
        )

        own_lists_stmt = (
            select(Category.slug, func.count(CuratedList.id))
            .join(Category, CuratedList.category_id == Category.id)
            .where(
                CuratedList.user_id == user_id,
                CuratedList.is_public.is_(True),
                CuratedList.deleted_at.is_(None),
            )
            .group_by(Category.slug)
        )
        result = await self._execute(ctx, own_lists_stmt, "user_category_lists")
        lists = {slug: count for slug, count in result.all()}

        return {
            slug: CategoryActivity(
                saves=saves.get(slug, 0),
                lists=lists.get(slug, 0),
                likes=likes.get(slug, 0),
            )
            for slug in sorted(set(saves) | set(lists) | set(likes))
        }

    async def get_creator_ids(self, ctx: QueryContext) -> list[int]:
        """공개 활성 리스트를 가진 사용자 id"""
        stmt = (
            select(distinct(CuratedList.user_id))
            .join(User, User.id == CuratedList.user_id)
            .where(
                CuratedList.is_public.is_(True),
                User.is_active.is_(True),
                CuratedList.is_active.is_(True),
                CuratedList.deleted_at.is_(None),
            )
            .order_by(CuratedList.user_id)
        )
        result = await self._execute(ctx, stmt, "creator_ids")
        return list(result.scalars().all())

    async def get_followed_creator_ids(
        self, ctx: QueryContext, user_id: int
    ) -> set[int]:
        stmt = select(Follow.following_id).where(Follow.follower_id == user_id)
        result = await self._execute(ctx, stmt, "followed_creators")
        return set(result.scalars().all())

    async def get_creator_category_counts(
        self, ctx: QueryContext, creator_ids: Sequence[int]
    ) -> dict[int, dict[str, int]]:
        """크리에이터별 카테고리 리스트 수 (카테고리 없음은 'other')"""
        if not creator_ids:
            return {}

        slug = func.coalesce(Category.slug, UNCATEGORIZED_SLUG)
        stmt = (
            select(CuratedList.user_id, slug, func.count(CuratedList.id))
            .outerjoin(Category, CuratedList.category_id == Category.id)
            .where(
                CuratedList.user_id.in_(creator_ids),
                CuratedList.is_public.is_(True),
                CuratedList.is_active.is_(True),
                CuratedList.deleted_at.is_(None),
            )
            .group_by(CuratedList.user_id, slug)
        )
        result = await self._execute(ctx, stmt, "creator_category_counts")

        counts: dict[int, dict[str, int]] = defaultdict(dict)
        for creator_id, category_slug, count in result.all():
            counts[creator_id][category_slug] = count
        return dict(counts)

    async def get_user_creator_interactions(
        self, ctx: QueryContext, user_id: int
    ) -> dict[int, CreatorInteraction]:
        """사용자가 크리에이터별로 남긴 저장/좋아요 수"""
        per_model: dict[str, dict[int, int]] = {}
        for name, model in (("saves", Bookmark), ("likes", ListLike)):
            stmt = (
                select(CuratedList.user_id, func.count(model.id))
                .select_from(model)
                .join(CuratedList, model.list_id == CuratedList.id)
                .where(model.user_id == user_id)
                .group_by(CuratedList.user_id)
            )
            result = await self._execute(ctx, stmt, f"creator_interaction_{name}")
            per_model[name] = {creator: count for creator, count in result.all()}

        saves, likes = per_model["saves"], per_model["likes"]
        return {
            creator_id: CreatorInteraction(
                saves=saves.get(creator_id, 0), likes=likes.get(creator_id, 0)
            )
            for creator_id in set(saves) | set(likes)
        }

    async def get_creator_ranking_snapshots(
        self, ctx: QueryContext, user_ids: Sequence[int]
    ) -> dict[int, CreatorRankingSnapshot]:
        if not user_ids:
            return {}

        stmt = select(CreatorRanking).where(CreatorRanking.user_id.in_(user_ids))
        result = await self._execute(ctx, stmt, "creator_rankings")
        return {
            r.user_id: CreatorRankingSnapshot(
                user_id=r.user_id,
                influence_score=r.influence_score or 0.0,
                momentum_score=r.momentum_score or 0.0,
            )
            for r in result.scalars().all()
        }

    async def get_creator_profiles(
        self, ctx: QueryContext, creator_ids: Sequence[int]
    ) -> dict[int, CreatorProfile]:
        """크리에이터 프로필 배치 조회

        비활성 사용자는 결과에서 빠집니다.
        """
        if not creator_ids:
            return {}

        users_result = await self._execute(
            ctx,
            select(User).where(User.id.in_(creator_ids), User.is_active.is_(True)),
            "creator_users",
        )
        users = {u.id: u for u in users_result.scalars().all()}
        if not users:
            return {}

        public = (
            CuratedList.user_id.in_(list(users)),
            CuratedList.is_public.is_(True),
            CuratedList.is_active.is_(True),
            CuratedList.deleted_at.is_(None),
        )

        viral = func.sum(
            case((CuratedList.like_count >= VIRAL_LIKE_THRESHOLD, 1), else_=0)
        )
        stats_result = await self._execute(
            ctx,
            select(
                CuratedList.user_id,
                func.count(CuratedList.id),
                func.coalesce(func.sum(CuratedList.like_count), 0),
                func.coalesce(viral, 0),
            )
            .where(*public)
            .group_by(CuratedList.user_id),
            "creator_list_stats",
        )
        stats = {
            row[0]: (int(row[1]), int(row[2]), int(row[3]))
            for row in stats_result.all()
        }

        list_count = func.count(CuratedList.id)
        categories_result = await self._execute(
            ctx,
            select(
                CuratedList.user_id,
                Category.id,
                Category.slug,
                Category.name,
                Category.icon,
                list_count,
            )
            .join(Category, CuratedList.category_id == Category.id)
            .where(*public)
            .group_by(
                CuratedList.user_id,
                Category.id,
                Category.slug,
                Category.name,
                Category.icon,
            )
            .order_by(CuratedList.user_id, list_count.desc(), Category.slug),
            "creator_top_categories",
        )
        top_categories: dict[int, list[CategoryInfo]] = defaultdict(list)
        for creator_id, cid, slug, name, icon, _ in categories_result.all():
            if len(top_categories[creator_id]) < TOP_CATEGORY_COUNT:
                top_categories[creator_id].append(
                    CategoryInfo(id=cid, slug=slug, name=name, icon=icon)
                )

        profiles = {}
        for creator_id, user in users.items():
            count, total_likes, viral_count = stats.get(creator_id, (0, 0, 0))
            profiles[creator_id] = CreatorProfile(
                user_id=creator_id,
                name=user.name,
                username=user.username,
                image=user.image,
                curator_level=user.curator_level or DEFAULT_CURATOR_LEVEL,
                list_count=count,
                total_likes=total_likes,
                viral_count=viral_count,
                top_categories=tuple(top_categories.get(creator_id, ())),
            )
        return profiles
