"""크리에이터 Discovery / Spotlight 모듈"""

from app.domains.ranking.discovery.service import (
    DiscoveryService,
    build_affinity_vector,
    category_affinity_score,
    inject_diversity,
)

__all__ = [
    "DiscoveryService",
    "build_affinity_vector",
    "category_affinity_score",
    "inject_diversity",
]
