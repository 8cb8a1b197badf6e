"""Ranking 도메인 응답 스키마

서비스 계층의 dataclass 결과를 from_attributes로 변환합니다.
"""

from typing import Optional

from pydantic import Field

from app.core.schemas import BaseSchema
from app.domains.ranking.types import TrendingBadge


class TrendingItem(BaseSchema):
    """Trending 항목"""

    list_id: int = Field(..., description="리스트 ID")
    title: str
    slug: str
    score: float = Field(..., description="Trending 점수")
    badge: TrendingBadge = Field(..., description="배지 (none/hot/viral)")
    creator_id: int
    category_id: Optional[int] = None
    category_slug: Optional[str] = None
    save_count: int = 0
    like_count: int = 0
    item_count: int = 0
    is_fast_rising: Optional[bool] = Field(
        None, description="24시간 저장 5회 이상 여부 (Fast Rising 뷰에서만 설정)"
    )


class WindowMetricsResponse(BaseSchema):
    saves: int
    likes: int
    comments: int
    views: int
    age_days: float
    save_velocity: float
    days_since_last_save: Optional[float] = None
    window_days: float


class ScoreBreakdownResponse(BaseSchema):
    score: float
    numerator: float
    denominator: float
    terms: dict[str, float]
    warnings: list[str]


class TrendingDebugResponse(BaseSchema):
    """단일 리스트 점수 디버그"""

    list_id: int
    title: str
    metrics: WindowMetricsResponse
    breakdown: ScoreBreakdownResponse
    badge: TrendingBadge
    position: Optional[int] = Field(
        None, description="전체 정렬 내 순위 (순위권 밖이면 null)"
    )
    total_ranked: int
    cache_status: str = Field(..., description="LIVE 또는 BYPASS")


class SimilarListItem(BaseSchema):
    """유사 리스트 항목"""

    id: int
    title: str
    slug: str
    category_id: Optional[int] = None
    save_count: int
    item_count: int
    strategy: str = Field(..., description="항목을 찾아낸 탐색 전략")
    score: Optional[float] = None


class CategoryInfoResponse(BaseSchema):
    id: int
    slug: str
    name: str
    icon: Optional[str] = None


class CreatorProfileResponse(BaseSchema):
    """크리에이터 프로필"""

    user_id: int
    name: Optional[str] = None
    username: Optional[str] = None
    image: Optional[str] = None
    curator_level: Optional[str] = None
    list_count: int = 0
    total_likes: int = 0
    viral_count: int = Field(0, description="좋아요 50개 이상 리스트 수")
    top_categories: list[CategoryInfoResponse] = Field(default_factory=list)


class RecommendedCreatorItem(BaseSchema):
    """추천 크리에이터"""

    profile: CreatorProfileResponse
    score: float
    affinity: float
    behavior: float
    influence: float
    momentum: float
    top_category: Optional[str] = None


class SpotlightResponse(BaseSchema):
    """Spotlight 크리에이터"""

    creator: CreatorProfileResponse
    score: float
    explanation: Optional[str] = Field(None, description="추천 사유")
    category_slug: Optional[str] = None
    category_name: Optional[str] = None
    is_rising_fallback: bool = False
