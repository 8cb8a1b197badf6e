"""Featured 도메인

홈 Featured 슬롯의 성과 분석과 다음 노출 후보 제안을 담당합니다.
"""

from app.domains.featured.exceptions import (
    FeaturedErrorCode,
    FeaturedSlotNotFoundException,
)
from app.domains.featured.models import FeaturedSlot
from app.domains.featured.service import FeaturedService

__all__ = [
    "FeaturedErrorCode",
    "FeaturedSlotNotFoundException",
    "FeaturedSlot",
    "FeaturedService",
]
