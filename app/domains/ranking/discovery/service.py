"""크리에이터 Discovery 서비스

사용자 취향(카테고리 친화도)과 행동 데이터를 바탕으로 팔로우할 만한
크리에이터를 추천하고, 한 명의 Spotlight 크리에이터를 선정합니다.

추천 점수:
    score = 0.35·affinity + 0.25·behavior + 0.20·influence
            + 0.10·momentum + 0.10·diversityBonus(0.1)

Spotlight 점수:
    score = 0.5·affinity + 0.2·influence + 0.2·momentum + 0.1·behavior
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import numpy as np

from app.core.cache import ScoreCache
from app.core.config import settings
from app.core.logging import get_logger
from app.domains.ranking.store import EngagementStore
from app.domains.ranking.types import (
    CategoryActivity,
    CreatorInteraction,
    QueryContext,
    RecommendedCreator,
    SpotlightResult,
)

logger = get_logger(__name__)

AFFINITY_SAVE_WEIGHT = 2
AFFINITY_LIST_WEIGHT = 3
AFFINITY_LIKE_WEIGHT = 1
AFFINITY_SCALE = 1.5
NEUTRAL_AFFINITY = 0.5

BEHAVIOR_SAVE_WEIGHT = 2
BEHAVIOR_LIKE_WEIGHT = 1

UNCATEGORIZED_SLUG = "other"
MAX_INJECTED = 2
SPOTLIGHT_PROFILE_LOOKAHEAD = 5
RISING_EXPLANATION = "rising creator this week"


@dataclass(frozen=True)
class DiscoveryWeights:
    """점수 가중치

    Attributes:
        behavior_default: 행동 점수가 0일 때 대신 사용할 값
        constant: 모든 크리에이터에 동일하게 더해지는 항 (다양성 보너스)
    """

    affinity: float
    behavior: float
    influence: float
    momentum: float
    behavior_default: float
    constant: float = 0.0

    def combine(
        self,
        affinity: float,
        behavior: float,
        influence: float,
        momentum: float,
    ) -> float:
        return (
            self.affinity * affinity
            + self.behavior * (behavior if behavior > 0 else self.behavior_default)
            + self.influence * influence
            + self.momentum * momentum
            + self.constant
        )


RECOMMENDATION_WEIGHTS = DiscoveryWeights(
    affinity=0.35,
    behavior=0.25,
    influence=0.20,
    momentum=0.10,
    behavior_default=0.3,
    constant=0.10 * 0.1,
)

SPOTLIGHT_WEIGHTS = DiscoveryWeights(
    affinity=0.5,
    behavior=0.1,
    influence=0.2,
    momentum=0.2,
    behavior_default=0.1,
)


@dataclass(frozen=True)
class CreatorScore:
    user_id: int
    score: float
    affinity: float
    behavior: float
    influence: float
    momentum: float
    top_category: Optional[str]


def normalize_distribution(weights: Mapping[str, float]) -> dict[str, float]:
    """합이 1이 되도록 정규화 (양수 항목만 유지)"""
    positive = {k: float(v) for k, v in weights.items() if v > 0}
    total = sum(positive.values())
    if total <= 0:
        return {}
    return {k: v / total for k, v in positive.items()}


def build_affinity_vector(
    activity: Mapping[str, CategoryActivity]
) -> dict[str, float]:
    """사용자 카테고리 친화도 벡터

    가중치 = 2×저장 + 3×본인 공개 리스트 + 1×좋아요
    """
    return normalize_distribution(
        {
            slug: AFFINITY_SAVE_WEIGHT * a.saves
            + AFFINITY_LIST_WEIGHT * a.lists
            + AFFINITY_LIKE_WEIGHT * a.likes
            for slug, a in activity.items()
        }
    )


def category_affinity_score(
    user_vector: Mapping[str, float], creator_vector: Mapping[str, float]
) -> float:
    """두 카테고리 분포의 내적 기반 친화도 (0~1)

    어느 한 쪽이 비어 있으면 중립값 0.5
    """
    if not user_vector or not creator_vector:
        return NEUTRAL_AFFINITY

    slugs = sorted(set(user_vector) | set(creator_vector))
    user_arr = np.array([user_vector.get(s, 0.0) for s in slugs])
    creator_arr = np.array([creator_vector.get(s, 0.0) for s in slugs])
    return min(1.0, float(np.dot(user_arr, creator_arr)) * AFFINITY_SCALE)


def normalize_score(value: float, max_value: float) -> float:
    if max_value <= 0:
        return 0.5
    return min(1.0, value / max_value)


def behavior_scores(
    interactions: Mapping[int, CreatorInteraction], user_id: int
) -> dict[int, float]:
    """크리에이터별 행동 유사도 (최대값으로 정규화)"""
    raw = {
        creator_id: BEHAVIOR_SAVE_WEIGHT * i.saves + BEHAVIOR_LIKE_WEIGHT * i.likes
        for creator_id, i in interactions.items()
        if creator_id != user_id
    }
    raw = {k: v for k, v in raw.items() if v > 0}
    if not raw:
        return {}
    max_value = max(raw.values())
    return {k: v / max_value for k, v in raw.items()}


def dominant_category(vector: Mapping[str, float]) -> Optional[str]:
    """가중치가 가장 큰 카테고리 (동률이면 slug 사전순)"""
    if not vector:
        return None
    return min(vector.items(), key=lambda kv: (-kv[1], kv[0]))[0]


def inject_diversity(
    scored: Sequence[CreatorScore],
    limit: int,
    max_injected: int = MAX_INJECTED,
) -> list[CreatorScore]:
    """카테고리 다양성 주입

    점수순으로 순회하며 대표 카테고리별로 한 명만 유지하고, 나머지는
    보조 풀로 보냅니다. 보조 풀에서 최대 max_injected명을 다시 넣은 뒤
    재정렬하여 limit개로 자릅니다.
    """
    ordered = sorted(scored, key=lambda s: (-s.score, s.user_id))
    used: set[str] = set()
    kept: list[CreatorScore] = []
    pool: list[CreatorScore] = []

    for item in ordered:
        if item.top_category and item.top_category in used:
            pool.append(item)
            continue
        kept.append(item)
        if item.top_category:
            used.add(item.top_category)

    kept.extend(pool[:max_injected])
    kept.sort(key=lambda s: (-s.score, s.user_id))
    return kept[:limit]


def build_spotlight_explanation(
    category_name: str, saves: int, lists: int
) -> str:
    """Spotlight 추천 사유 문장"""
    parts = []
    if saves > 0:
        parts.append(f"saved {saves} {category_name} items")
    if lists > 0:
        parts.append(f"created {lists} {category_name} lists")
    if not parts:
        return f"because you're active in {category_name}"
    return "because you " + " and ".join(parts)


class DiscoveryService:
    """크리에이터 추천 / Spotlight 서비스"""

    def __init__(
        self,
        store: EngagementStore,
        cache: Optional[ScoreCache] = None,
        spotlight_ttl_seconds: Optional[int] = None,
    ):
        self.store = store
        self.cache = cache
        self.spotlight_ttl_seconds = (
            spotlight_ttl_seconds or settings.spotlight_cache_ttl_seconds
        )

    async def get_affinity_vector(
        self, ctx: QueryContext, user_id: int
    ) -> dict[str, float]:
        activity = await self.store.get_user_category_activity(ctx, user_id)
        return build_affinity_vector(activity)

    async def _eligible_creator_ids(
        self, ctx: QueryContext, user_id: int
    ) -> list[int]:
        """공개 리스트가 있는 크리에이터 (본인, 이미 팔로우한 사람 제외)"""
        creator_ids = await self.store.get_creator_ids(ctx)
        followed = await self.store.get_followed_creator_ids(ctx, user_id)
        return [c for c in creator_ids if c != user_id and c not in followed]

    async def _score_creators(
        self,
        ctx: QueryContext,
        user_id: int,
        creator_ids: Sequence[int],
        user_vector: Mapping[str, float],
        weights: DiscoveryWeights,
    ) -> list[CreatorScore]:
        creator_counts = await self.store.get_creator_category_counts(
            ctx, creator_ids
        )
        interactions = await self.store.get_user_creator_interactions(
            ctx, user_id
        )
        rankings = await self.store.get_creator_ranking_snapshots(
            ctx, creator_ids
        )

        behavior = behavior_scores(interactions, user_id)
        max_influence = max(
            [1.0, *(r.influence_score for r in rankings.values())]
        )
        max_momentum = max(
            [1.0, *(r.momentum_score for r in rankings.values())]
        )

        scored = []
        for creator_id in creator_ids:
            creator_vector = normalize_distribution(
                creator_counts.get(creator_id, {})
            )
            ranking = rankings.get(creator_id)
            affinity = category_affinity_score(user_vector, creator_vector)
            beh = behavior.get(creator_id, 0.0)
            influence = normalize_score(
                ranking.influence_score if ranking else 0.0, max_influence
            )
            momentum = normalize_score(
                ranking.momentum_score if ranking else 0.0, max_momentum
            )
            scored.append(
                CreatorScore(
                    user_id=creator_id,
                    score=weights.combine(affinity, beh, influence, momentum),
                    affinity=affinity,
                    behavior=beh,
                    influence=influence,
                    momentum=momentum,
                    top_category=dominant_category(creator_vector),
                )
            )

        scored.sort(key=lambda s: (-s.score, s.user_id))
        return scored

    async def get_recommended_creators(
        self, ctx: QueryContext, user_id: int, limit: int = 10
    ) -> list[RecommendedCreator]:
        """팔로우 추천 크리에이터

        후보가 없으면 빈 리스트를 반환합니다.
        """
        creator_ids = await self._eligible_creator_ids(ctx, user_id)
        if not creator_ids:
            return []

        user_vector = await self.get_affinity_vector(ctx, user_id)
        scored = await self._score_creators(
            ctx, user_id, creator_ids, user_vector, RECOMMENDATION_WEIGHTS
        )
        selected = inject_diversity(scored, limit)

        # 프로필/통계는 최종 후보 집합에 대해 한 번만 조회
        profiles = await self.store.get_creator_profiles(
            ctx, [s.user_id for s in selected]
        )

        logger.info(
            f"Recommended creators for user {user_id}: "
            f"{len(selected)} of {len(creator_ids)} eligible"
        )
        return [
            RecommendedCreator(
                profile=profiles[s.user_id],
                score=s.score,
                affinity=s.affinity,
                behavior=s.behavior,
                influence=s.influence,
                momentum=s.momentum,
                top_category=s.top_category,
            )
            for s in selected
            if s.user_id in profiles
        ]

    async def get_spotlight_creator(
        self, ctx: QueryContext, user_id: int
    ) -> Optional[SpotlightResult]:
        """개인화 Spotlight 크리에이터 1명 + 추천 사유"""
        key = f"spotlight:{user_id}"
        if self.cache is not None and ctx.reads_cache:
            cached = await self.cache.get_json(key)
            if cached is not None:
                return SpotlightResult.from_dict(cached)

        result = await self._compute_spotlight(ctx, user_id)

        if result is not None and self.cache is not None and ctx.writes_cache:
            await self.cache.set_json(
                key, result.to_dict(), self.spotlight_ttl_seconds
            )
        return result

    async def _compute_spotlight(
        self, ctx: QueryContext, user_id: int
    ) -> Optional[SpotlightResult]:
        creator_ids = await self._eligible_creator_ids(ctx, user_id)
        if not creator_ids:
            return None

        activity = await self.store.get_user_category_activity(ctx, user_id)
        user_vector = build_affinity_vector(activity)

        if not user_vector:
            return await self._rising_fallback(ctx, creator_ids)

        scored = await self._score_creators(
            ctx, user_id, creator_ids, user_vector, SPOTLIGHT_WEIGHTS
        )
        head = scored[:SPOTLIGHT_PROFILE_LOOKAHEAD]
        profiles = await self.store.get_creator_profiles(
            ctx, [s.user_id for s in head]
        )
        top = next((s for s in head if s.user_id in profiles), None)
        if top is None:
            return None

        profile = profiles[top.user_id]
        category_name = None
        explanation = None
        if top.top_category:
            category_name = next(
                (
                    c.name
                    for c in profile.top_categories
                    if c.slug == top.top_category
                ),
                top.top_category,
            )
            own = activity.get(top.top_category, CategoryActivity())
            explanation = build_spotlight_explanation(
                category_name, own.saves, own.lists
            )

        return SpotlightResult(
            creator=profile,
            score=top.score,
            explanation=explanation,
            category_slug=top.top_category,
            category_name=category_name,
        )

    async def _rising_fallback(
        self, ctx: QueryContext, creator_ids: Sequence[int]
    ) -> Optional[SpotlightResult]:
        """취향 데이터가 없는 사용자: 모멘텀 최상위 크리에이터"""
        rankings = await self.store.get_creator_ranking_snapshots(
            ctx, creator_ids
        )
        rising = [r for r in rankings.values() if r.momentum_score > 0]
        if not rising:
            return None

        best = min(rising, key=lambda r: (-r.momentum_score, r.user_id))
        profiles = await self.store.get_creator_profiles(ctx, [best.user_id])
        profile = profiles.get(best.user_id)
        if profile is None:
            return None

        return SpotlightResult(
            creator=profile,
            score=best.momentum_score,
            explanation=RISING_EXPLANATION,
            is_rising_fallback=True,
        )
