"""Ranking 도메인

Trending 점수/선택, 유사 리스트, 크리에이터 Discovery를 담당합니다.
"""

from app.domains.ranking.exceptions import (
    AggregationFailedException,
    ListNotFoundException,
    RankingErrorCode,
)
from app.domains.ranking.store import EngagementStore
from app.domains.ranking.types import CachePolicy, CreatorPolicy, QueryContext

__all__ = [
    "AggregationFailedException",
    "ListNotFoundException",
    "RankingErrorCode",
    "EngagementStore",
    "CachePolicy",
    "CreatorPolicy",
    "QueryContext",
]
