"""Featured 도메인 예외 정의"""

from enum import Enum

from app.core.exceptions import NotFoundException


class FeaturedErrorCode(str, Enum):
    FEATURED_SLOT_NOT_FOUND = "FEATURED_SLOT_NOT_FOUND"


class FeaturedSlotNotFoundException(NotFoundException):
    """Featured 슬롯을 찾을 수 없는 경우"""

    def __init__(self, slot_id: int | None = None):
        detail = {"slot_id": slot_id} if slot_id else {}
        super().__init__(
            message="Featured 슬롯을 찾을 수 없습니다.",
            error_code=FeaturedErrorCode.FEATURED_SLOT_NOT_FOUND,
            detail=detail,
        )
