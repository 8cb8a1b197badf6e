"""Featured 도메인 응답 스키마"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from app.core.schemas import BaseSchema
from app.domains.featured.types import ImpactLabel


class FeaturedPerformanceResponse(BaseSchema):
    """슬롯 성과"""

    slot_id: int
    list_id: int
    impressions: int
    clicks: int
    ctr: float = Field(..., description="클릭률 (clicks / impressions)")
    saves_during: int
    baseline_saves: Optional[int] = None
    save_lift_percent: Optional[float] = None
    baseline_score: Optional[float] = None
    peak_score: Optional[float] = None
    score_lift_percent: Optional[float] = None
    impact_label: ImpactLabel
    recommendations: list[str] = Field(default_factory=list)


class SlotPerformanceRowResponse(BaseSchema):
    slot_id: int
    list_id: int
    list_title: str
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    ctr: float
    save_lift_percent: Optional[float] = None
    score_lift_percent: Optional[float] = None
    impact_label: ImpactLabel


class BestPerformerResponse(BaseSchema):
    list_id: int
    list_title: str
    save_lift_percent: float


class WeeklyReportResponse(BaseSchema):
    """주간 리포트"""

    week_start: datetime
    week_end: datetime
    total_slots: int
    avg_ctr: float
    avg_save_lift: Optional[float] = None
    best_performer: Optional[BestPerformerResponse] = None
    slots: list[SlotPerformanceRowResponse]
    recommendations: list[str]


class CategoryInsightRowResponse(BaseSchema):
    category_id: Optional[int] = Field(None, description="카테고리 없음은 null")
    category_name: str
    featured_count: int
    avg_ctr: float
    avg_save_lift: Optional[float] = None
    avg_score_lift: Optional[float] = None
    impact_score: float
    rank: int


class CategoryInsightsResponse(BaseSchema):
    """카테고리 인사이트"""

    range_days: int
    start: datetime
    end: datetime
    categories: list[CategoryInsightRowResponse]
    recommendations: list[str]


class CategoryRotationStatResponse(BaseSchema):
    category_id: Optional[int] = None
    name: str
    recent_count: int
    in_last_slot: bool
    rotation_modifier: float


class RotationInsightResponse(BaseSchema):
    """카테고리 로테이션 분석"""

    category_stats: list[CategoryRotationStatResponse]
    suggested_category: Optional[str] = None
    suggested_category_id: Optional[int] = None
    reasoning: str


class FeaturedSuggestionResponse(BaseSchema):
    list_id: int
    title: str
    slug: str
    cover_image: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    suggestion_score: float
    trending_score: float
    save_velocity: float
    saves_7d: int
    category_impact_score: float
    reasons: list[str]


class FeaturedSuggestionsResponse(BaseSchema):
    """Featured 후보 제안"""

    suggestions: list[FeaturedSuggestionResponse]
    rotation: Optional[RotationInsightResponse] = None


class PeakRefreshResponse(BaseSchema):
    updated_slots: int = Field(..., description="peak_score가 기록된 슬롯 수")
