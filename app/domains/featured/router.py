"""Featured 도메인 라우터

관리자 콘솔용 Featured 분석 및 스냅샷 기록 API 엔드포인트입니다.
모든 엔드포인트는 내부 API Key가 필요합니다.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import verify_internal_api_key
from app.core.schemas import APIResponse, create_response
from app.domains.featured.repository import FeaturedSlotRepository
from app.domains.featured.schemas import (
    CategoryInsightsResponse,
    FeaturedPerformanceResponse,
    FeaturedSuggestionsResponse,
    PeakRefreshResponse,
    RotationInsightResponse,
    WeeklyReportResponse,
)
from app.domains.featured.service import FeaturedService
from app.domains.featured.store import FeaturedSlotStore
from app.domains.ranking.dependencies import (
    get_engagement_store,
    get_query_context,
    get_trending_service,
)
from app.domains.ranking.store import EngagementStore
from app.domains.ranking.trending import TrendingService
from app.domains.ranking.types import QueryContext

router = APIRouter(dependencies=[Depends(verify_internal_api_key)])


def get_featured_store(
    session: AsyncSession = Depends(get_db),
) -> FeaturedSlotStore:
    return FeaturedSlotRepository(session)


def get_featured_service(
    store: FeaturedSlotStore = Depends(get_featured_store),
    engagement_store: EngagementStore = Depends(get_engagement_store),
    trending: TrendingService = Depends(get_trending_service),
) -> FeaturedService:
    """FeaturedService 의존성"""
    return FeaturedService(store, engagement_store, trending)


@router.get(
    "/slots/{slot_id}/performance",
    response_model=APIResponse[FeaturedPerformanceResponse],
)
async def get_featured_performance(
    slot_id: int = Path(..., gt=0),
    ctx: QueryContext = Depends(get_query_context),
    service: FeaturedService = Depends(get_featured_service),
):
    """슬롯 성과"""
    performance = await service.get_featured_performance(ctx, slot_id)
    return create_response(
        data=FeaturedPerformanceResponse.model_validate(performance)
    )


@router.post(
    "/slots/{slot_id}/baseline",
    response_model=APIResponse[FeaturedPerformanceResponse],
)
async def capture_baseline(
    slot_id: int = Path(..., gt=0),
    ctx: QueryContext = Depends(get_query_context),
    service: FeaturedService = Depends(get_featured_service),
):
    """슬롯 baseline 스냅샷 기록 (이미 기록된 값은 유지)"""
    performance = await service.capture_baseline(ctx, slot_id)
    return create_response(
        data=FeaturedPerformanceResponse.model_validate(performance),
        message="Baseline 스냅샷이 기록되었습니다.",
    )


@router.post("/peaks/refresh", response_model=APIResponse[PeakRefreshResponse])
async def refresh_active_peaks(
    ctx: QueryContext = Depends(get_query_context),
    service: FeaturedService = Depends(get_featured_service),
):
    """활성 슬롯 peak_score 갱신"""
    updated = await service.refresh_active_peaks(ctx)
    return create_response(data=PeakRefreshResponse(updated_slots=updated))


@router.get("/reports/weekly", response_model=APIResponse[WeeklyReportResponse])
async def get_weekly_featured_report(
    week_start: Optional[datetime] = Query(
        None, description="주 시작 시각 (생략 시 7일 전 자정)"
    ),
    ctx: QueryContext = Depends(get_query_context),
    service: FeaturedService = Depends(get_featured_service),
):
    """주간 Featured 리포트"""
    report = await service.get_weekly_featured_report(ctx, week_start)
    return create_response(data=WeeklyReportResponse.model_validate(report))


@router.get(
    "/insights/categories",
    response_model=APIResponse[CategoryInsightsResponse],
)
async def get_featured_category_insights(
    range_days: int = Query(30, ge=1, le=365),
    ctx: QueryContext = Depends(get_query_context),
    service: FeaturedService = Depends(get_featured_service),
):
    """카테고리별 Featured 성과"""
    insights = await service.get_featured_category_insights(ctx, range_days)
    return create_response(data=CategoryInsightsResponse.model_validate(insights))


@router.get("/rotation", response_model=APIResponse[RotationInsightResponse])
async def get_rotation_insight(
    ctx: QueryContext = Depends(get_query_context),
    service: FeaturedService = Depends(get_featured_service),
):
    """카테고리 로테이션 분석"""
    insight = await service.get_rotation_insight(ctx)
    return create_response(data=RotationInsightResponse.model_validate(insight))


@router.get(
    "/suggestions", response_model=APIResponse[FeaturedSuggestionsResponse]
)
async def get_featured_suggestions(
    top_n: int = Query(5, ge=1, le=20),
    ctx: QueryContext = Depends(get_query_context),
    service: FeaturedService = Depends(get_featured_service),
):
    """다음 Featured 후보 제안"""
    suggestions = await service.get_featured_suggestions(ctx, top_n=top_n)
    return create_response(
        data=FeaturedSuggestionsResponse.model_validate(suggestions)
    )
