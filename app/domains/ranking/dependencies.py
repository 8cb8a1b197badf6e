"""Ranking 도메인 의존성

요청 컨텍스트(기준 시각, 데드라인, 캐시 정책)와 서비스 인스턴스를
요청마다 생성합니다.
"""

from datetime import datetime
from typing import Optional

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import ScoreCache, get_score_cache
from app.core.config import settings
from app.core.database import get_db
from app.domains.ranking.discovery import DiscoveryService
from app.domains.ranking.repository import EngagementRepository
from app.domains.ranking.similarity import SimilarityService
from app.domains.ranking.store import EngagementStore
from app.domains.ranking.trending import TrendingService
from app.domains.ranking.types import CachePolicy, CreatorPolicy, QueryContext


def get_query_context(
    at: Optional[datetime] = Query(
        None, description="평가 기준 시각 (지정 시 캐시를 사용하지 않음)"
    ),
    force_recompute: bool = Query(
        False, description="캐시를 무시하고 재계산 후 스냅샷 갱신"
    ),
) -> QueryContext:
    """요청 단위 QueryContext"""
    if at is not None:
        policy = CachePolicy.BYPASS
    elif force_recompute:
        policy = CachePolicy.FORCE_RECOMPUTE
    else:
        policy = CachePolicy.USE_CACHE

    return QueryContext.create(
        now=at,
        timeout_seconds=settings.query_timeout_seconds or None,
        cache_policy=policy,
    )


def get_creator_policy() -> CreatorPolicy:
    return CreatorPolicy(excluded_roles=frozenset(settings.creator_excluded_roles))


def get_engagement_store(
    session: AsyncSession = Depends(get_db),
    policy: CreatorPolicy = Depends(get_creator_policy),
) -> EngagementStore:
    """EngagementStore 의존성"""
    return EngagementRepository(session, policy)


def get_trending_service(
    store: EngagementStore = Depends(get_engagement_store),
    cache: Optional[ScoreCache] = Depends(get_score_cache),
) -> TrendingService:
    """TrendingService 의존성"""
    return TrendingService(store, cache=cache)


def get_similarity_service(
    store: EngagementStore = Depends(get_engagement_store),
) -> SimilarityService:
    """SimilarityService 의존성"""
    return SimilarityService(store)


def get_discovery_service(
    store: EngagementStore = Depends(get_engagement_store),
    cache: Optional[ScoreCache] = Depends(get_score_cache),
) -> DiscoveryService:
    """DiscoveryService 의존성"""
    return DiscoveryService(store, cache=cache)
