"""유사 리스트 탐색 전략

각 전략은 독립적으로 후보를 수집하며, 서비스가 정해진 순서대로
실행하다가 필요한 개수가 채워지면 중단합니다.

    1. BehavioralBlendStrategy    공동 저장(co-save) + 콘텐츠 점수 블렌드
    2. ContentOverlapStrategy     카테고리/태그 공유 후보의 콘텐츠 점수
    3. CategoryPopularityStrategy 같은 카테고리 저장 수 상위
    4. GlobalPopularityStrategy   전체 저장 수 상위
"""

from typing import AbstractSet, Optional, Protocol, Sequence

from app.core.logging import get_logger
from app.domains.ranking.similarity.scoring import content_similarity
from app.domains.ranking.store import EngagementStore
from app.domains.ranking.types import EntitySnapshot, QueryContext, SimilarList

logger = get_logger(__name__)

MIN_SAVERS_FOR_BEHAVIOR = 5
CO_SAVE_LIMIT = 10
BEHAVIOR_WEIGHT = 0.6
CONTENT_WEIGHT = 0.4
CONTENT_CANDIDATE_LIMIT = 30


class SimilarityStrategy(Protocol):
    name: str

    async def collect(
        self,
        ctx: QueryContext,
        source: EntitySnapshot,
        need: int,
        exclude_ids: AbstractSet[int],
    ) -> list[SimilarList]:
        ...


def _to_similar(
    snapshot: EntitySnapshot, strategy: str, score: Optional[float] = None
) -> SimilarList:
    return SimilarList(
        id=snapshot.id,
        title=snapshot.title,
        slug=snapshot.slug,
        category_id=snapshot.category_id,
        save_count=snapshot.save_count,
        item_count=snapshot.item_count,
        strategy=strategy,
        score=score,
    )


def _content_scores(
    source: EntitySnapshot, candidates: Sequence[EntitySnapshot]
) -> dict[int, float]:
    """후보별 콘텐츠 점수 (저장 수 최대값은 기준 리스트 포함)"""
    max_save_count = max(
        [source.save_count, *(c.save_count for c in candidates), 1]
    )
    base = source.as_similarity_candidate()
    return {
        c.id: content_similarity(
            base, c.as_similarity_candidate(), max_save_count
        )
        for c in candidates
    }


class BehavioralBlendStrategy:
    """공동 저장 행동 기반 + 콘텐츠 블렌드

    기준 리스트를 저장한 사용자가 MIN_SAVERS_FOR_BEHAVIOR명 이상일 때만
    동작합니다.

    final = 0.6 × (공동 저장 수 / 코호트 크기) + 0.4 × (콘텐츠 점수 / 최대 콘텐츠 점수)
    """

    name = "behavioral"

    def __init__(
        self,
        store: EngagementStore,
        min_savers: int = MIN_SAVERS_FOR_BEHAVIOR,
        co_save_limit: int = CO_SAVE_LIMIT,
    ):
        self.store = store
        self.min_savers = min_savers
        self.co_save_limit = co_save_limit

    async def collect(
        self,
        ctx: QueryContext,
        source: EntitySnapshot,
        need: int,
        exclude_ids: AbstractSet[int],
    ) -> list[SimilarList]:
        cohort_size = await self.store.count_distinct_savers(ctx, source.id)
        if cohort_size < self.min_savers:
            return []

        co_saved = [
            (list_id, overlap)
            for list_id, overlap in await self.store.get_co_saved_lists(
                ctx, source.id, self.co_save_limit
            )
            if list_id not in exclude_ids
        ]
        if not co_saved:
            return []

        overlaps = dict(co_saved)
        candidates = await self.store.get_lists_by_ids(ctx, list(overlaps))
        if not candidates:
            return []

        content = _content_scores(source, candidates)
        max_content = max([*content.values(), 1.0])

        scored = []
        for candidate in candidates:
            behavior = min(1.0, overlaps.get(candidate.id, 0) / cohort_size)
            score = (
                BEHAVIOR_WEIGHT * behavior
                + CONTENT_WEIGHT * content[candidate.id] / max_content
            )
            scored.append((score, candidate))

        scored.sort(key=lambda pair: (-pair[0], pair[1].id))
        return [_to_similar(c, self.name, s) for s, c in scored[:need]]


class ContentOverlapStrategy:
    """카테고리 또는 태그를 공유하는 후보의 콘텐츠 점수 순"""

    name = "content"

    def __init__(
        self,
        store: EngagementStore,
        candidate_limit: int = CONTENT_CANDIDATE_LIMIT,
    ):
        self.store = store
        self.candidate_limit = candidate_limit

    async def collect(
        self,
        ctx: QueryContext,
        source: EntitySnapshot,
        need: int,
        exclude_ids: AbstractSet[int],
    ) -> list[SimilarList]:
        if source.category_id is None and not source.tags:
            return []

        candidates = await self.store.get_similarity_candidates(
            ctx, source, self.candidate_limit, exclude_ids=sorted(exclude_ids)
        )
        if not candidates:
            return []

        content = _content_scores(source, candidates)
        ranked = sorted(candidates, key=lambda c: (-content[c.id], c.id))
        return [_to_similar(c, self.name, content[c.id]) for c in ranked[:need]]


class CategoryPopularityStrategy:
    """같은 카테고리 저장 수 상위"""

    name = "category_popular"

    def __init__(self, store: EngagementStore):
        self.store = store

    async def collect(
        self,
        ctx: QueryContext,
        source: EntitySnapshot,
        need: int,
        exclude_ids: AbstractSet[int],
    ) -> list[SimilarList]:
        if source.category_id is None:
            return []

        lists = await self.store.get_top_saved_lists(
            ctx,
            need,
            category_id=source.category_id,
            exclude_ids=sorted(exclude_ids),
        )
        return [_to_similar(s, self.name) for s in lists]


class GlobalPopularityStrategy:
    """전체 저장 수 상위 (최종 fallback)"""

    name = "global_popular"

    def __init__(self, store: EngagementStore):
        self.store = store

    async def collect(
        self,
        ctx: QueryContext,
        source: EntitySnapshot,
        need: int,
        exclude_ids: AbstractSet[int],
    ) -> list[SimilarList]:
        lists = await self.store.get_top_saved_lists(
            ctx, need, exclude_ids=sorted(exclude_ids)
        )
        return [_to_similar(s, self.name) for s in lists]


def default_strategies(store: EngagementStore) -> list[SimilarityStrategy]:
    return [
        BehavioralBlendStrategy(store),
        ContentOverlapStrategy(store),
        CategoryPopularityStrategy(store),
        GlobalPopularityStrategy(store),
    ]
