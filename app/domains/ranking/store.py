"""참여 데이터 저장소 인터페이스

랭킹 엔진이 소비하는 조회 인터페이스입니다. 모든 메서드는
후보 id 집합 단위로 한 번에 조회(배치)하며, `QueryContext`의 데드라인을
모든 쿼리에 전파해야 합니다.

구현체:
    - EngagementRepository (SQLAlchemy, app/domains/ranking/repository.py)
    - 테스트용 인메모리 구현 (tests/fakes.py)
"""

from datetime import datetime
from typing import Optional, Protocol, Sequence

from app.domains.ranking.types import (
    CategoryActivity,
    CategoryInfo,
    CreatorInteraction,
    CreatorProfile,
    CreatorRankingSnapshot,
    EngagementKind,
    EntitySnapshot,
    QueryContext,
)


class EngagementStore(Protocol):
    # 윈도우 집계
    async def get_engagement_counts(
        self,
        ctx: QueryContext,
        entity_ids: Sequence[int],
        kind: EngagementKind,
        since: datetime,
    ) -> dict[int, int]:
        ...

    async def get_last_activity_timestamps(
        self,
        ctx: QueryContext,
        entity_ids: Sequence[int],
        kind: EngagementKind,
        since: datetime,
    ) -> dict[int, datetime]:
        ...

    async def get_entity_snapshots(
        self, ctx: QueryContext, entity_ids: Sequence[int]
    ) -> dict[int, EntitySnapshot]:
        ...

    # Trending 후보
    async def list_active_categories(
        self, ctx: QueryContext
    ) -> list[CategoryInfo]:
        ...

    async def get_category_candidates(
        self,
        ctx: QueryContext,
        category_ids: Sequence[int],
        per_category: int,
    ) -> list[EntitySnapshot]:
        ...

    async def get_lists_saved_since(
        self, ctx: QueryContext, since: datetime, limit: int
    ) -> list[EntitySnapshot]:
        ...

    async def get_top_saved_lists(
        self,
        ctx: QueryContext,
        limit: int,
        category_id: Optional[int] = None,
        exclude_ids: Sequence[int] = (),
    ) -> list[EntitySnapshot]:
        ...

    # 유사 리스트
    async def get_similarity_source(
        self, ctx: QueryContext, list_id: int
    ) -> Optional[EntitySnapshot]:
        ...

    async def count_distinct_savers(
        self, ctx: QueryContext, list_id: int
    ) -> int:
        ...

    async def get_co_saved_lists(
        self, ctx: QueryContext, list_id: int, limit: int
    ) -> list[tuple[int, int]]:
        ...

    async def get_lists_by_ids(
        self, ctx: QueryContext, list_ids: Sequence[int]
    ) -> list[EntitySnapshot]:
        ...

    async def get_similarity_candidates(
        self,
        ctx: QueryContext,
        source: EntitySnapshot,
        limit: int,
        exclude_ids: Sequence[int] = (),
    ) -> list[EntitySnapshot]:
        ...

    # 크리에이터 추천
    async def get_user_category_activity(
        self, ctx: QueryContext, user_id: int
    ) -> dict[str, CategoryActivity]:
        ...

    async def get_creator_ids(self, ctx: QueryContext) -> list[int]:
        ...

    async def get_followed_creator_ids(
        self, ctx: QueryContext, user_id: int
    ) -> set[int]:
        ...

    async def get_creator_category_counts(
        self, ctx: QueryContext, creator_ids: Sequence[int]
    ) -> dict[int, dict[str, int]]:
        ...

    async def get_user_creator_interactions(
        self, ctx: QueryContext, user_id: int
    ) -> dict[int, CreatorInteraction]:
        ...

    async def get_creator_ranking_snapshots(
        self, ctx: QueryContext, user_ids: Sequence[int]
    ) -> dict[int, CreatorRankingSnapshot]:
        ...

    async def get_creator_profiles(
        self, ctx: QueryContext, creator_ids: Sequence[int]
    ) -> dict[int, CreatorProfile]:
        ...
