"""공통 API 응답 스키마

이 모듈은 API 응답의 일관된 구조를 정의합니다.

Usage::

    from app.core.schemas import APIResponse, create_response
    return create_response(data=results, message="Trending 조회 성공")
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")


class BaseSchema(BaseModel):
    """기본 스키마 (dataclass/ORM 변환용)"""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class APIResponse(BaseModel, Generic[DataT]):
    """단일 데이터 API 응답

    Example::

        @router.get("/global", response_model=APIResponse[list[TrendingItem]])
        async def get_global_trending(...):
            results = await service.get_global_trending(ctx, limit)
            return create_response(
                data=[TrendingItem.model_validate(r) for r in results]
            )
    """

    success: bool = True
    message: str = "요청이 성공적으로 처리되었습니다."
    data: Optional[DataT] = None


def create_response(
    data: Optional[DataT] = None,
    message: str = "요청이 성공적으로 처리되었습니다.",
    success: bool = True,
) -> APIResponse[DataT]:
    """API 응답 생성 팩토리 함수

    Args:
        data: 응답 데이터
        message: 응답 메시지
        success: 성공 여부
    """
    return APIResponse(success=success, message=message, data=data)


class ErrorDetail(BaseModel):
    """에러 상세 정보"""

    code: str = Field(..., description="에러 코드")
    message: str = Field(..., description="에러 메시지")
    detail: Optional[dict[str, Any]] = Field(default=None, description="추가 정보")


class ErrorResponse(BaseModel):
    """에러 API 응답

    Example::

        {
            "success": false,
            "message": "랭킹 집계 쿼리에 실패했습니다.",
            "error": {
                "code": "AGGREGATION_FAILED",
                "message": "랭킹 집계 쿼리에 실패했습니다.",
                "detail": {"operation": "engagement_counts", "reason": "timeout"}
            }
        }
    """

    success: bool = False
    message: str
    error: ErrorDetail
