"""Featured 서비스

슬롯 성과 분석, 주간/카테고리 리포트, 로테이션 분석, 후보 제안과
슬롯 점수 스냅샷(baseline/peak) 기록을 담당합니다.
"""

from datetime import datetime, timedelta
from typing import Optional

from app.core.logging import get_logger
from app.core.utils.datetime import ensure_utc, start_of_day
from app.domains.featured.analytics import (
    build_category_insights,
    build_weekly_report,
    evaluate_slot,
)
from app.domains.featured.exceptions import FeaturedSlotNotFoundException
from app.domains.featured.store import FeaturedSlotStore
from app.domains.featured.suggestions import (
    build_rotation_insight,
    suggestion_reasons,
    suggestion_score,
)
from app.domains.featured.types import (
    CategoryInsights,
    FeaturedPerformance,
    FeaturedSuggestion,
    FeaturedSuggestions,
    RotationInsight,
    WeeklyReport,
)
from app.domains.ranking.scoring import calculate_trending_score
from app.domains.ranking.store import EngagementStore
from app.domains.ranking.trending import TrendingService
from app.domains.ranking.types import QueryContext

logger = get_logger(__name__)

WEEK_DAYS = 7
CATEGORY_INSIGHT_DAYS = 30
ROTATION_SLOT_COUNT = 4
SUGGESTION_POOL_SIZE = 500
SUGGESTION_CANDIDATE_LIMIT = 200
SUGGESTION_TOP_N = 5
RECENT_FEATURED_DAYS = 14


class FeaturedService:
    """Featured 분석 서비스"""

    def __init__(
        self,
        store: FeaturedSlotStore,
        engagement_store: EngagementStore,
        trending: Optional[TrendingService] = None,
    ):
        self.store = store
        self.engagement_store = engagement_store
        self.trending = trending or TrendingService(engagement_store)

    async def get_featured_performance(
        self, ctx: QueryContext, slot_id: int
    ) -> FeaturedPerformance:
        """단일 슬롯 성과 + 추천 문구

        Raises:
            FeaturedSlotNotFoundException: 슬롯이 없는 경우
        """
        slot = await self.store.get_slot(ctx, slot_id)
        if slot is None:
            raise FeaturedSlotNotFoundException(slot_id=slot_id)
        return evaluate_slot(slot)

    async def get_weekly_featured_report(
        self, ctx: QueryContext, week_start: Optional[datetime] = None
    ) -> WeeklyReport:
        """[week_start, week_start + 7일) 구간에 시작한 슬롯 리포트

        week_start를 생략하면 기준 시각 7일 전 자정부터 집계합니다.
        """
        start = (
            ensure_utc(week_start)
            if week_start is not None
            else start_of_day(ctx.since(WEEK_DAYS))
        )
        end = start + timedelta(days=WEEK_DAYS)

        slots = await self.store.get_slots_started_between(ctx, start, end)
        report = build_weekly_report(start, end, slots)
        logger.info(
            f"Weekly featured report {start.date()}: {report.total_slots} slots, "
            f"avg CTR {report.avg_ctr:.3f}"
        )
        return report

    async def get_featured_category_insights(
        self, ctx: QueryContext, range_days: int = CATEGORY_INSIGHT_DAYS
    ) -> CategoryInsights:
        """최근 range_days일 카테고리별 Featured 성과"""
        start = start_of_day(ctx.since(range_days))
        slots = await self.store.get_slots_started_between(ctx, start)
        return build_category_insights(range_days, start, ctx.now, slots)

    async def get_rotation_insight(
        self, ctx: QueryContext, last_n: int = ROTATION_SLOT_COUNT
    ) -> RotationInsight:
        recent = await self.store.get_recent_slots(ctx, last_n)
        categories = await self.engagement_store.list_active_categories(ctx)
        return build_rotation_insight(recent, categories)

    async def get_featured_suggestions(
        self, ctx: QueryContext, top_n: int = SUGGESTION_TOP_N
    ) -> FeaturedSuggestions:
        """다음 Featured 후보 제안

        후보 조건:
            - 저장 수 상위 500개 리스트
            - 현재 노출 중이거나 예약되지 않음
            - 최근 14일 내 노출되지 않음
        """
        insights = await self.get_featured_category_insights(ctx)
        rotation = await self.get_rotation_insight(ctx)
        impact_by_category = {
            c.category_id: c.impact_score for c in insights.categories
        }
        modifiers = rotation.modifiers_by_category

        last_featured = await self.store.get_last_featured_at(ctx)
        scheduled = await self.store.get_scheduled_list_ids(ctx)
        cutoff = start_of_day(ctx.since(RECENT_FEATURED_DAYS))

        pool = await self.engagement_store.get_top_saved_lists(
            ctx, SUGGESTION_POOL_SIZE
        )
        eligible = [
            lst
            for lst in pool
            if lst.id not in scheduled
            and not (
                lst.id in last_featured
                and ensure_utc(last_featured[lst.id]) >= cutoff
            )
        ]
        if not eligible:
            return FeaturedSuggestions(suggestions=[], rotation=rotation)

        metrics = await self.trending.aggregator.aggregate(
            ctx,
            [lst.id for lst in eligible],
            created_at={lst.id: lst.created_at for lst in eligible},
        )
        ranked = sorted(
            (
                (calculate_trending_score(metrics[lst.id]), lst)
                for lst in eligible
            ),
            key=lambda pair: (-pair[0], pair[1].id),
        )[:SUGGESTION_CANDIDATE_LIMIT]

        scored = []
        for trending_score, lst in ranked:
            m = metrics[lst.id]
            category_impact = (
                impact_by_category.get(lst.category_id, 0.0)
                if lst.category_id is not None
                else 0.0
            )
            modifier = (
                modifiers.get(lst.category_id, 0.0)
                if lst.category_id is not None
                else 0.0
            )
            score = suggestion_score(
                trending_score, m.save_velocity, category_impact, m.saves, modifier
            )
            scored.append(
                (
                    score,
                    FeaturedSuggestion(
                        list_id=lst.id,
                        title=lst.title,
                        slug=lst.slug,
                        cover_image=lst.cover_image,
                        category_id=lst.category_id,
                        category_name=lst.category_name,
                        suggestion_score=round(score, 1),
                        trending_score=round(trending_score, 1),
                        save_velocity=round(m.save_velocity, 1),
                        saves_7d=m.saves,
                        category_impact_score=round(category_impact, 1),
                        reasons=suggestion_reasons(
                            trending_score,
                            m.save_velocity,
                            m.saves,
                            category_impact,
                            modifier,
                        ),
                    ),
                )
            )

        scored.sort(key=lambda pair: (-pair[0], pair[1].list_id))
        suggestions = [s for _, s in scored[:top_n]]
        logger.info(
            f"Featured suggestions: {len(suggestions)} of {len(eligible)} eligible"
        )
        return FeaturedSuggestions(suggestions=suggestions, rotation=rotation)

    async def capture_baseline(
        self, ctx: QueryContext, slot_id: int
    ) -> FeaturedPerformance:
        """슬롯 시작 시점 스냅샷 기록 (최초 기록 유지)

        baseline_saves = 리스트 저장 수, baseline_score = peak_score = 현재 점수
        """
        slot = await self.store.get_slot(ctx, slot_id)
        if slot is None:
            raise FeaturedSlotNotFoundException(slot_id=slot_id)

        scores = await self.trending.get_trending_scores(ctx, [slot.list_id])
        score = scores.get(slot.list_id, 0.0)

        updated = await self.store.upsert_featured_slot_score_snapshot(
            ctx,
            slot_id,
            baseline_score=score,
            peak_score=score,
            baseline_saves=slot.list_save_count,
        )
        if not updated:
            logger.warning(f"Baseline not recorded for ended slot {slot_id}")

        refreshed = await self.store.get_slot(ctx, slot_id)
        return evaluate_slot(refreshed or slot)

    async def refresh_active_peaks(self, ctx: QueryContext) -> int:
        """활성 슬롯의 peak_score 갱신

        Returns:
            갱신된 슬롯 수
        """
        slots = await self.store.get_active_slots(ctx)
        if not slots:
            return 0

        scores = await self.trending.get_trending_scores(
            ctx, sorted({s.list_id for s in slots})
        )

        updated = 0
        for slot in slots:
            score = scores.get(slot.list_id)
            if score is None:
                continue
            if await self.store.upsert_featured_slot_score_snapshot(
                ctx, slot.id, peak_score=score
            ):
                updated += 1

        logger.info(f"Refreshed peak scores: {updated}/{len(slots)} active slots")
        return updated
