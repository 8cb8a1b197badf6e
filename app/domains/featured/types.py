"""Featured 도메인 타입 정의"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ImpactLabel(str, Enum):
    HIGH = "High Impact"
    MODERATE = "Moderate"
    LOW = "Low Impact"


@dataclass(frozen=True)
class FeaturedSlotRecord:
    """노출 리스트/카테고리 정보가 결합된 Featured 슬롯"""

    id: int
    list_id: int
    start_at: datetime
    end_at: Optional[datetime] = None
    impressions: int = 0
    clicks: int = 0
    baseline_saves: Optional[int] = None
    saves_during: int = 0
    baseline_score: Optional[float] = None
    peak_score: Optional[float] = None
    list_title: Optional[str] = None
    list_save_count: int = 0
    category_id: Optional[int] = None
    category_name: Optional[str] = None

    def is_active_at(self, now: datetime) -> bool:
        return self.start_at <= now and (self.end_at is None or self.end_at > now)


@dataclass(frozen=True)
class FeaturedPerformance:
    """단일 슬롯 성과

    Attributes:
        ctr: clicks / impressions (노출이 없으면 0)
        save_lift_percent: saves_during / baseline_saves × 100
        score_lift_percent: (peak - baseline) / baseline × 100
    """

    slot_id: int
    list_id: int
    impressions: int
    clicks: int
    ctr: float
    saves_during: int
    baseline_saves: Optional[int]
    save_lift_percent: Optional[float]
    baseline_score: Optional[float]
    peak_score: Optional[float]
    score_lift_percent: Optional[float]
    impact_label: ImpactLabel
    recommendations: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SlotPerformanceRow:
    slot_id: int
    list_id: int
    list_title: str
    category_id: Optional[int]
    category_name: Optional[str]
    ctr: float
    save_lift_percent: Optional[float]
    score_lift_percent: Optional[float]
    impact_label: ImpactLabel


@dataclass(frozen=True)
class BestPerformer:
    list_id: int
    list_title: str
    save_lift_percent: float


@dataclass(frozen=True)
class WeeklyReport:
    """주간 Featured 리포트 ([week_start, week_end) 구간에 시작한 슬롯)"""

    week_start: datetime
    week_end: datetime
    total_slots: int
    avg_ctr: float
    avg_save_lift: Optional[float]
    best_performer: Optional[BestPerformer]
    slots: list[SlotPerformanceRow]
    recommendations: list[str]


@dataclass(frozen=True)
class CategoryInsightRow:
    category_id: Optional[int]
    category_name: str
    featured_count: int
    avg_ctr: float
    avg_save_lift: Optional[float]
    avg_score_lift: Optional[float]
    impact_score: float
    rank: int


@dataclass(frozen=True)
class CategoryInsights:
    range_days: int
    start: datetime
    end: datetime
    categories: list[CategoryInsightRow]
    recommendations: list[str]


@dataclass(frozen=True)
class CategoryRotationStat:
    """최근 슬롯 내 카테고리 노출 현황

    Attributes:
        recent_count: 최근 N개 슬롯 중 노출 횟수
        in_last_slot: 가장 최근 슬롯에 노출되었는지 여부
        rotation_modifier: 제안 점수 보정값 (score × (1 + modifier))
    """

    category_id: Optional[int]
    name: str
    recent_count: int
    in_last_slot: bool
    rotation_modifier: float


@dataclass(frozen=True)
class RotationInsight:
    category_stats: list[CategoryRotationStat]
    suggested_category: Optional[str]
    suggested_category_id: Optional[int]
    reasoning: str

    @property
    def modifiers_by_category(self) -> dict[Optional[int], float]:
        return {s.category_id: s.rotation_modifier for s in self.category_stats}


@dataclass(frozen=True)
class FeaturedSuggestion:
    list_id: int
    title: str
    slug: str
    cover_image: Optional[str]
    category_id: Optional[int]
    category_name: Optional[str]
    suggestion_score: float
    trending_score: float
    save_velocity: float
    saves_7d: int
    category_impact_score: float
    reasons: list[str]


@dataclass(frozen=True)
class FeaturedSuggestions:
    suggestions: list[FeaturedSuggestion]
    rotation: Optional[RotationInsight] = None
