"""Ranking 도메인 예외 정의"""

from enum import Enum

from app.core.exceptions import NotFoundException, ServiceUnavailableException


class RankingErrorCode(str, Enum):
    """랭킹 도메인 에러 코드"""

    AGGREGATION_FAILED = "AGGREGATION_FAILED"
    LIST_NOT_FOUND = "LIST_NOT_FOUND"


class AggregationFailedException(ServiceUnavailableException):
    """집계 쿼리 실패 (스토리지 오류 또는 데드라인 초과)

    "데이터 없음"(기본 점수로 처리)과 구분되는 "데이터를 가져올 수 없음"
    상태입니다. 호출자는 재시도하거나 대체 UI로 강등할 수 있습니다.
    """

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(
            message="랭킹 집계 쿼리에 실패했습니다.",
            error_code=RankingErrorCode.AGGREGATION_FAILED,
            detail={"operation": operation, "reason": reason},
        )


class ListNotFoundException(NotFoundException):
    """리스트를 찾을 수 없는 경우"""

    def __init__(self, list_id: int | None = None):
        detail = {"list_id": list_id} if list_id else {}
        super().__init__(
            message="리스트를 찾을 수 없습니다.",
            error_code=RankingErrorCode.LIST_NOT_FOUND,
            detail=detail,
        )
