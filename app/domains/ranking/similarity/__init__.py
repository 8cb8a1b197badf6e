"""유사 리스트 모듈"""

from app.domains.ranking.similarity.service import SimilarityService
from app.domains.ranking.similarity.strategies import (
    BehavioralBlendStrategy,
    CategoryPopularityStrategy,
    ContentOverlapStrategy,
    GlobalPopularityStrategy,
    SimilarityStrategy,
    default_strategies,
)

__all__ = [
    "SimilarityService",
    "SimilarityStrategy",
    "BehavioralBlendStrategy",
    "ContentOverlapStrategy",
    "CategoryPopularityStrategy",
    "GlobalPopularityStrategy",
    "default_strategies",
]
