"""랭킹 도메인 타입 정의

계산 과정에서만 사용되는 값 객체들입니다. 저장되지 않으며
요청마다 새로 생성됩니다.
"""

import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from app.core.utils.datetime import ensure_utc, now_utc


class EngagementKind(str, Enum):
    """집계 대상 참여 이벤트 종류"""

    SAVE = "save"
    LIKE = "like"
    COMMENT = "comment"


class TrendingBadge(str, Enum):
    """Trending 배지 등급"""

    NONE = "none"
    HOT = "hot"
    VIRAL = "viral"


class CachePolicy(str, Enum):
    """캐시 정책

    - USE_CACHE: 캐시 조회 후 미스면 계산하여 저장
    - FORCE_RECOMPUTE: 캐시를 읽지 않고 재계산한 뒤 스냅샷 갱신
      (관리자 "재계산" 액션)
    - BYPASS: 캐시를 읽지도 쓰지도 않음 (기준 시각을 지정한 조회)
    """

    USE_CACHE = "use_cache"
    FORCE_RECOMPUTE = "force_recompute"
    BYPASS = "bypass"


@dataclass(frozen=True)
class QueryContext:
    """요청 단위 계산 컨텍스트

    Attributes:
        now: 모든 시간 윈도우의 기준 시각 (테스트에서 고정 가능)
        deadline: time.monotonic() 기준 마감 시각 (None이면 무제한)
        cache_policy: 캐시 사용 정책

    Example::

        ctx = QueryContext.create(
            now=datetime(2025, 3, 1, tzinfo=UTC),
            timeout_seconds=5,
            cache_policy=CachePolicy.FORCE_RECOMPUTE,
        )
        since = ctx.since(days=7)
    """

    now: datetime = field(default_factory=now_utc)
    deadline: Optional[float] = None
    cache_policy: CachePolicy = CachePolicy.USE_CACHE

    @classmethod
    def create(
        cls,
        now: Optional[datetime] = None,
        timeout_seconds: Optional[float] = None,
        cache_policy: CachePolicy = CachePolicy.USE_CACHE,
    ) -> "QueryContext":
        deadline = (
            time.monotonic() + timeout_seconds if timeout_seconds else None
        )
        return cls(
            now=ensure_utc(now) if now is not None else now_utc(),
            deadline=deadline,
            cache_policy=cache_policy,
        )

    def since(self, days: float) -> datetime:
        """기준 시각으로부터 days일 전"""
        return self.now - timedelta(days=days)

    def remaining(self) -> Optional[float]:
        """마감까지 남은 초 (마감이 없으면 None)"""
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    @property
    def reads_cache(self) -> bool:
        return self.cache_policy == CachePolicy.USE_CACHE

    @property
    def writes_cache(self) -> bool:
        return self.cache_policy != CachePolicy.BYPASS


@dataclass(frozen=True)
class CreatorPolicy:
    """크리에이터 자격 정책

    제외 역할(기본: 일반 사용자)의 리스트는 Trending/유사 리스트 후보가
    될 수 없습니다.
    """

    excluded_roles: frozenset[str] = frozenset({"USER"})

    def allows(self, role: Optional[str]) -> bool:
        return role not in self.excluded_roles


@dataclass(frozen=True)
class CategoryInfo:
    id: int
    slug: str
    name: str
    icon: Optional[str] = None


@dataclass(frozen=True)
class SimilarityCandidate:
    """유사도 계산용 최소 투영"""

    id: int
    category_id: Optional[int]
    save_count: int
    tags: tuple[str, ...] = ()
    item_titles: tuple[str, ...] = ()


@dataclass(frozen=True)
class EntitySnapshot:
    """스토리지가 소유하는 리스트 스냅샷 (읽기 전용)"""

    id: int
    title: str
    slug: str
    creator_id: int
    category_id: Optional[int] = None
    category_slug: Optional[str] = None
    category_name: Optional[str] = None
    save_count: int = 0
    like_count: int = 0
    view_count: int = 0
    item_count: int = 0
    created_at: Optional[datetime] = None
    cover_image: Optional[str] = None
    tags: tuple[str, ...] = ()
    item_titles: tuple[str, ...] = ()

    def as_similarity_candidate(self) -> SimilarityCandidate:
        return SimilarityCandidate(
            id=self.id,
            category_id=self.category_id,
            save_count=self.save_count,
            tags=self.tags,
            item_titles=self.item_titles,
        )


@dataclass(frozen=True)
class WindowMetrics:
    """윈도우 단위 지표

    Attributes:
        saves: 윈도우 내 저장 수 (S7)
        likes: 윈도우 내 좋아요 수 (L7)
        comments: 윈도우 내 승인된 댓글 수 (C7)
        views: 조회 수 (V7, 현재 상위 시스템에서 추적하지 않아 항상 0)
        age_days: 리스트 생성 후 경과 일수
        save_velocity: 최근성 보정 저장 속도
        days_since_last_save: 마지막 저장 후 경과 일수
        window_days: 집계 윈도우 길이 (일)
    """

    saves: int = 0
    likes: int = 0
    comments: int = 0
    views: int = 0
    age_days: float = 0.0
    save_velocity: float = 0.0
    days_since_last_save: Optional[float] = None
    window_days: float = 7


@dataclass(frozen=True)
class ScoreBreakdown:
    """Trending 점수 분해 (디버그용)"""

    score: float
    numerator: float
    denominator: float
    terms: dict[str, float] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TrendingResult:
    """Trending 뷰 항목"""

    list_id: int
    title: str
    slug: str
    score: float
    badge: TrendingBadge
    creator_id: int
    category_id: Optional[int] = None
    category_slug: Optional[str] = None
    save_count: int = 0
    like_count: int = 0
    item_count: int = 0
    is_fast_rising: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["badge"] = self.badge.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrendingResult":
        return cls(**{**data, "badge": TrendingBadge(data["badge"])})


@dataclass(frozen=True)
class TrendingDebug:
    """단일 리스트 점수 디버그 결과"""

    list_id: int
    title: str
    metrics: WindowMetrics
    breakdown: ScoreBreakdown
    badge: TrendingBadge
    position: Optional[int]
    total_ranked: int
    cache_status: str


@dataclass(frozen=True)
class SimilarList:
    """유사 리스트 결과

    Attributes:
        strategy: 이 항목을 찾아낸 전략 이름
        score: 전략 내부 점수 (인기도 fallback은 None)
    """

    id: int
    title: str
    slug: str
    category_id: Optional[int]
    save_count: int
    item_count: int
    strategy: str
    score: Optional[float] = None


@dataclass(frozen=True)
class CategoryActivity:
    """사용자의 카테고리별 활동 수"""

    saves: int = 0
    lists: int = 0
    likes: int = 0


@dataclass(frozen=True)
class CreatorInteraction:
    """사용자가 특정 크리에이터의 리스트에 남긴 저장/좋아요 수"""

    saves: int = 0
    likes: int = 0


@dataclass(frozen=True)
class CreatorRankingSnapshot:
    user_id: int
    influence_score: float = 0.0
    momentum_score: float = 0.0


@dataclass(frozen=True)
class CreatorProfile:
    """추천 결과에 표시할 크리에이터 프로필 (배치 조회)"""

    user_id: int
    name: Optional[str] = None
    username: Optional[str] = None
    image: Optional[str] = None
    curator_level: Optional[str] = None
    list_count: int = 0
    total_likes: int = 0
    viral_count: int = 0
    top_categories: tuple[CategoryInfo, ...] = ()


@dataclass(frozen=True)
class RecommendedCreator:
    """추천 크리에이터와 점수 구성 요소"""

    profile: CreatorProfile
    score: float
    affinity: float
    behavior: float
    influence: float
    momentum: float
    top_category: Optional[str] = None


@dataclass(frozen=True)
class SpotlightResult:
    creator: CreatorProfile
    score: float
    explanation: Optional[str]
    category_slug: Optional[str] = None
    category_name: Optional[str] = None
    is_rising_fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpotlightResult":
        creator = dict(data["creator"])
        creator["top_categories"] = tuple(
            CategoryInfo(**c) for c in creator.get("top_categories", ())
        )
        return cls(**{**data, "creator": CreatorProfile(**creator)})
