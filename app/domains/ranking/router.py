"""Ranking 도메인 라우터

Trending, 유사 리스트, 크리에이터 Discovery API 엔드포인트입니다.
모든 엔드포인트는 `at`(기준 시각)과 `force_recompute` 쿼리 파라미터를 받습니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from app.core.dependencies import verify_internal_api_key
from app.core.schemas import APIResponse, create_response
from app.domains.ranking.dependencies import (
    get_discovery_service,
    get_query_context,
    get_similarity_service,
    get_trending_service,
)
from app.domains.ranking.discovery import DiscoveryService
from app.domains.ranking.schemas import (
    RecommendedCreatorItem,
    SimilarListItem,
    SpotlightResponse,
    TrendingDebugResponse,
    TrendingItem,
)
from app.domains.ranking.similarity import SimilarityService
from app.domains.ranking.trending import TrendingService
from app.domains.ranking.trending.service import FULL_SORTED_MAX_ITEMS
from app.domains.ranking.types import QueryContext

trending_router = APIRouter()
lists_router = APIRouter()
discovery_router = APIRouter()


def _trending_items(results) -> list[TrendingItem]:
    return [TrendingItem.model_validate(r) for r in results]


# ---------------------------------------------------------------------------
# Trending
# ---------------------------------------------------------------------------


@trending_router.get("/global", response_model=APIResponse[list[TrendingItem]])
async def get_global_trending(
    limit: int = Query(6, ge=1, le=50, description="조회 개수"),
    ctx: QueryContext = Depends(get_query_context),
    service: TrendingService = Depends(get_trending_service),
):
    """전역 Trending (카테고리당 최대 3개)"""
    results = await service.get_global_trending(ctx, limit=limit)
    return create_response(data=_trending_items(results))


@trending_router.get(
    "/categories/{category_id}",
    response_model=APIResponse[list[TrendingItem]],
)
async def get_category_trending(
    category_id: int = Path(..., gt=0),
    limit: int = Query(10, ge=1, le=50),
    ctx: QueryContext = Depends(get_query_context),
    service: TrendingService = Depends(get_trending_service),
):
    """카테고리 Trending"""
    results = await service.get_category_trending(ctx, category_id, limit=limit)
    return create_response(data=_trending_items(results))


@trending_router.get(
    "/fast-rising", response_model=APIResponse[list[TrendingItem]]
)
async def get_fast_rising(
    limit: int = Query(6, ge=1, le=50),
    ctx: QueryContext = Depends(get_query_context),
    service: TrendingService = Depends(get_trending_service),
):
    """24시간 급상승"""
    results = await service.get_fast_rising(ctx, limit=limit)
    return create_response(data=_trending_items(results))


@trending_router.get("/monthly", response_model=APIResponse[list[TrendingItem]])
async def get_monthly_popular(
    limit: int = Query(6, ge=1, le=50),
    ctx: QueryContext = Depends(get_query_context),
    service: TrendingService = Depends(get_trending_service),
):
    """30일 인기"""
    results = await service.get_monthly_popular(ctx, limit=limit)
    return create_response(data=_trending_items(results))


@trending_router.get(
    "/full",
    response_model=APIResponse[list[TrendingItem]],
    dependencies=[Depends(verify_internal_api_key)],
)
async def get_full_sorted_trending(
    max_items: int = Query(
        FULL_SORTED_MAX_ITEMS, ge=1, le=FULL_SORTED_MAX_ITEMS
    ),
    ctx: QueryContext = Depends(get_query_context),
    service: TrendingService = Depends(get_trending_service),
):
    """다양성 제한 없는 전체 정렬 (관리자용)"""
    results = await service.get_full_sorted_trending(ctx, max_items=max_items)
    return create_response(data=_trending_items(results))


@trending_router.get(
    "/lists/{list_id}/debug",
    response_model=APIResponse[TrendingDebugResponse],
    dependencies=[Depends(verify_internal_api_key)],
)
async def get_list_trending_debug(
    list_id: int = Path(..., gt=0),
    ctx: QueryContext = Depends(get_query_context),
    service: TrendingService = Depends(get_trending_service),
):
    """단일 리스트 점수 분해 및 순위"""
    debug = await service.get_list_trending_debug(ctx, list_id)
    return create_response(data=TrendingDebugResponse.model_validate(debug))


# ---------------------------------------------------------------------------
# 유사 리스트
# ---------------------------------------------------------------------------


@lists_router.get(
    "/{list_id}/similar", response_model=APIResponse[list[SimilarListItem]]
)
async def get_similar_lists(
    list_id: int = Path(..., gt=0),
    ctx: QueryContext = Depends(get_query_context),
    service: SimilarityService = Depends(get_similarity_service),
):
    """유사 리스트 (최대 4개)"""
    results = await service.get_top_similar_lists(ctx, list_id)
    return create_response(
        data=[SimilarListItem.model_validate(r) for r in results]
    )


# ---------------------------------------------------------------------------
# 크리에이터 Discovery
# ---------------------------------------------------------------------------


@discovery_router.get(
    "/users/{user_id}/creators",
    response_model=APIResponse[list[RecommendedCreatorItem]],
)
async def get_recommended_creators(
    user_id: int = Path(..., gt=0),
    limit: int = Query(10, ge=1, le=50),
    ctx: QueryContext = Depends(get_query_context),
    service: DiscoveryService = Depends(get_discovery_service),
):
    """팔로우 추천 크리에이터"""
    results = await service.get_recommended_creators(ctx, user_id, limit=limit)
    return create_response(
        data=[RecommendedCreatorItem.model_validate(r) for r in results]
    )


@discovery_router.get(
    "/users/{user_id}/spotlight",
    response_model=APIResponse[Optional[SpotlightResponse]],
)
async def get_spotlight_creator(
    user_id: int = Path(..., gt=0),
    ctx: QueryContext = Depends(get_query_context),
    service: DiscoveryService = Depends(get_discovery_service),
):
    """Spotlight 크리에이터 (대상이 없으면 data는 null)"""
    result = await service.get_spotlight_creator(ctx, user_id)
    if result is None:
        return create_response(data=None, message="추천할 크리에이터가 없습니다.")
    return create_response(data=SpotlightResponse.model_validate(result))
