"""Trending 선택 모듈"""

from app.domains.ranking.trending.service import (
    TrendingService,
    apply_diversity_cap,
    sort_by_score,
)

__all__ = ["TrendingService", "apply_diversity_cap", "sort_by_score"]
