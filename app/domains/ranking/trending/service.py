"""Trending 선택 서비스

처리 흐름:
    카테고리별 후보 조회 → 점수 계산 → 카테고리별 top-K
    → 전역 병합 정렬 → 다양성 제한(카테고리당 최대 3개) → limit 절단

동점은 list_id 오름차순으로 정렬하여 결과 순서를 결정적으로 유지합니다.
"""

from collections import defaultdict
from typing import Awaitable, Callable, Iterable, Optional, Sequence

from app.core.cache import ScoreCache
from app.core.config import settings
from app.core.logging import get_logger
from app.core.utils.time import measure_time
from app.domains.ranking.exceptions import ListNotFoundException
from app.domains.ranking.metrics import DEFAULT_WINDOW_DAYS, MetricsAggregator
from app.domains.ranking.scoring import (
    apply_fast_rising_boost,
    calculate_trending_score,
    explain_trending_score,
    get_trending_badge,
    is_fast_rising,
)
from app.domains.ranking.store import EngagementStore
from app.domains.ranking.types import (
    EntitySnapshot,
    QueryContext,
    TrendingDebug,
    TrendingResult,
)

logger = get_logger(__name__)

CATEGORY_POOL_SIZE = 100
GLOBAL_PER_CATEGORY = 10
FULL_PER_CATEGORY = 20
MAX_PER_CATEGORY = 3
FAST_RISING_POOL_SIZE = 80
FAST_RISING_WINDOW_DAYS = 1
MONTHLY_POOL_SIZE = 100
MONTHLY_WINDOW_DAYS = 30
FULL_SORTED_MAX_ITEMS = 500


def sort_by_score(results: Iterable[TrendingResult]) -> list[TrendingResult]:
    """점수 내림차순, 동점은 list_id 오름차순"""
    return sorted(results, key=lambda r: (-r.score, r.list_id))


def apply_diversity_cap(
    results: Sequence[TrendingResult],
    max_per_category: int = MAX_PER_CATEGORY,
    limit: Optional[int] = None,
) -> list[TrendingResult]:
    """정렬된 결과에서 카테고리당 최대 max_per_category개만 유지

    Args:
        results: 점수 순으로 정렬된 결과
        max_per_category: 카테고리당 최대 개수
        limit: 최종 개수 (None이면 제한 없음)
    """
    counts: dict[Optional[int], int] = defaultdict(int)
    selected: list[TrendingResult] = []
    for result in results:
        if limit is not None and len(selected) >= limit:
            break
        if counts[result.category_id] >= max_per_category:
            continue
        counts[result.category_id] += 1
        selected.append(result)
    return selected


def _to_result(
    snapshot: EntitySnapshot,
    score: float,
    fast_rising: Optional[bool] = None,
) -> TrendingResult:
    return TrendingResult(
        list_id=snapshot.id,
        title=snapshot.title,
        slug=snapshot.slug,
        score=score,
        badge=get_trending_badge(score),
        creator_id=snapshot.creator_id,
        category_id=snapshot.category_id,
        category_slug=snapshot.category_slug,
        save_count=snapshot.save_count,
        like_count=snapshot.like_count,
        item_count=snapshot.item_count,
        is_fast_rising=fast_rising,
    )


class TrendingService:
    """Trending 뷰 서비스

    Global / Category / Fast Rising / Monthly / Full Sorted 뷰와
    단일 리스트 점수 디버그를 제공합니다.
    """

    def __init__(
        self,
        store: EngagementStore,
        cache: Optional[ScoreCache] = None,
        cache_ttl_seconds: Optional[int] = None,
    ):
        self.store = store
        self.aggregator = MetricsAggregator(store)
        self.cache = cache
        self.cache_ttl_seconds = (
            cache_ttl_seconds or settings.trending_cache_ttl_seconds
        )

    async def _cached(
        self,
        ctx: QueryContext,
        key: str,
        compute: Callable[[], Awaitable[list[TrendingResult]]],
    ) -> list[TrendingResult]:
        if self.cache is not None and ctx.reads_cache:
            cached = await self.cache.get_json(key)
            if cached is not None:
                logger.debug(f"Trending cache hit: {key}")
                return [TrendingResult.from_dict(item) for item in cached]

        with measure_time() as timer:
            results = await compute()
        logger.info(
            f"Trending view '{key}' computed: {len(results)} items "
            f"in {timer['elapsed_ms']:.1f}ms ({ctx.cache_policy.value})"
        )

        if self.cache is not None and ctx.writes_cache:
            await self.cache.set_json(
                key, [r.to_dict() for r in results], self.cache_ttl_seconds
            )
        return results

    async def _score(
        self,
        ctx: QueryContext,
        candidates: Sequence[EntitySnapshot],
        window_days: float = DEFAULT_WINDOW_DAYS,
    ) -> list[TrendingResult]:
        metrics = await self.aggregator.aggregate(
            ctx,
            [c.id for c in candidates],
            window_days=window_days,
            created_at={c.id: c.created_at for c in candidates},
        )
        return [
            _to_result(c, calculate_trending_score(metrics[c.id]))
            for c in candidates
        ]

    async def _merged_category_tops(
        self, ctx: QueryContext, per_category: int
    ) -> list[TrendingResult]:
        """모든 활성 카테고리의 top-K를 병합하여 점수순 정렬"""
        categories = await self.store.list_active_categories(ctx)
        if not categories:
            return []

        candidates = await self.store.get_category_candidates(
            ctx, [c.id for c in categories], CATEGORY_POOL_SIZE
        )
        scored = await self._score(ctx, candidates)

        by_category: dict[Optional[int], list[TrendingResult]] = defaultdict(
            list
        )
        for result in scored:
            by_category[result.category_id].append(result)

        merged: list[TrendingResult] = []
        for results in by_category.values():
            merged.extend(sort_by_score(results)[:per_category])
        return sort_by_score(merged)

    async def get_global_trending(
        self, ctx: QueryContext, limit: int = 6
    ) -> list[TrendingResult]:
        """전역 Trending (카테고리당 top-10 병합, 카테고리당 최대 3개)"""

        async def compute() -> list[TrendingResult]:
            merged = await self._merged_category_tops(ctx, GLOBAL_PER_CATEGORY)
            return apply_diversity_cap(merged, MAX_PER_CATEGORY, limit)

        return await self._cached(ctx, f"trending:global:{limit}", compute)

    async def get_category_trending(
        self, ctx: QueryContext, category_id: int, limit: int = 10
    ) -> list[TrendingResult]:
        """단일 카테고리 Trending (다양성 제한 없음)"""

        async def compute() -> list[TrendingResult]:
            candidates = await self.store.get_category_candidates(
                ctx, [category_id], CATEGORY_POOL_SIZE
            )
            return sort_by_score(await self._score(ctx, candidates))[:limit]

        return await self._cached(
            ctx, f"trending:category:{category_id}:{limit}", compute
        )

    async def get_fast_rising(
        self, ctx: QueryContext, limit: int = 6
    ) -> list[TrendingResult]:
        """24시간 급상승

        최근 24시간 내 저장이 있는 리스트만 대상으로 1일 윈도우 점수에
        S1(24시간 저장 수) 보너스를 더합니다.
        """

        async def compute() -> list[TrendingResult]:
            candidates = await self.store.get_lists_saved_since(
                ctx, ctx.since(FAST_RISING_WINDOW_DAYS), FAST_RISING_POOL_SIZE
            )
            metrics = await self.aggregator.aggregate(
                ctx,
                [c.id for c in candidates],
                window_days=FAST_RISING_WINDOW_DAYS,
                created_at={c.id: c.created_at for c in candidates},
            )

            results = []
            for candidate in candidates:
                m = metrics[candidate.id]
                score = apply_fast_rising_boost(
                    calculate_trending_score(m), m.saves
                )
                results.append(
                    _to_result(candidate, score, is_fast_rising(m.saves))
                )
            return sort_by_score(results)[:limit]

        return await self._cached(ctx, f"trending:fast-rising:{limit}", compute)

    async def get_monthly_popular(
        self, ctx: QueryContext, limit: int = 6
    ) -> list[TrendingResult]:
        """30일 인기 (저장 수 상위 100개 후보를 30일 윈도우로 점수화)"""

        async def compute() -> list[TrendingResult]:
            candidates = await self.store.get_top_saved_lists(
                ctx, MONTHLY_POOL_SIZE
            )
            scored = await self._score(ctx, candidates, MONTHLY_WINDOW_DAYS)
            return sort_by_score(scored)[:limit]

        return await self._cached(ctx, f"trending:monthly:{limit}", compute)

    async def get_full_sorted_trending(
        self, ctx: QueryContext, max_items: int = FULL_SORTED_MAX_ITEMS
    ) -> list[TrendingResult]:
        """다양성 제한 없는 전체 정렬 (디버그/순위 조회용, 캐시하지 않음)"""
        merged = await self._merged_category_tops(ctx, FULL_PER_CATEGORY)
        return merged[:max_items]

    async def get_trending_scores(
        self, ctx: QueryContext, list_ids: Sequence[int]
    ) -> dict[int, float]:
        """여러 리스트의 현재 7일 점수 (Featured baseline/peak 용)"""
        snapshots = await self.store.get_entity_snapshots(ctx, list_ids)
        if not snapshots:
            return {}
        results = await self._score(ctx, list(snapshots.values()))
        return {r.list_id: r.score for r in results}

    async def get_trending_score_for_list(
        self, ctx: QueryContext, list_id: int
    ) -> float:
        scores = await self.get_trending_scores(ctx, [list_id])
        if list_id not in scores:
            raise ListNotFoundException(list_id=list_id)
        return scores[list_id]

    async def get_list_trending_debug(
        self, ctx: QueryContext, list_id: int
    ) -> TrendingDebug:
        """단일 리스트 점수 분해 및 전역 순위"""
        snapshots = await self.store.get_entity_snapshots(ctx, [list_id])
        snapshot = snapshots.get(list_id)
        if snapshot is None:
            raise ListNotFoundException(list_id=list_id)

        metrics = await self.aggregator.aggregate(
            ctx, [list_id], created_at={list_id: snapshot.created_at}
        )
        breakdown = explain_trending_score(metrics[list_id])

        full = await self.get_full_sorted_trending(ctx)
        position = next(
            (i + 1 for i, r in enumerate(full) if r.list_id == list_id), None
        )

        logger.debug(
            f"List {list_id} score={breakdown.score:.2f} "
            f"terms={breakdown.terms} warnings={breakdown.warnings}"
        )
        return TrendingDebug(
            list_id=list_id,
            title=snapshot.title,
            metrics=metrics[list_id],
            breakdown=breakdown,
            badge=get_trending_badge(breakdown.score),
            position=position,
            total_ranked=len(full),
            cache_status="LIVE" if ctx.reads_cache else "BYPASS",
        )
