"""스키마 단위 테스트"""

from app.core.schemas import (
    APIResponse,
    ErrorDetail,
    ErrorResponse,
    create_response,
)
from app.domains.ranking.schemas import TrendingItem
from app.domains.ranking.types import TrendingBadge, TrendingResult


class TestAPIResponse:
    """APIResponse 테스트"""

    def test_success_response_with_data(self):
        """데이터가 있는 성공 응답"""
        response = APIResponse(
            success=True,
            data={"id": 1, "title": "test"},
            message="조회 성공",
        )

        assert response.success is True
        assert response.message == "조회 성공"
        assert response.data == {"id": 1, "title": "test"}

    def test_default_message(self):
        """기본 메시지"""
        response = APIResponse(success=True)

        assert response.message == "요청이 성공적으로 처리되었습니다."
        assert response.data is None

    def test_create_response_factory(self):
        """팩토리 함수는 성공 응답을 생성"""
        response = create_response(data=[1, 2], message="Trending 조회 성공")

        assert response.success is True
        assert response.data == [1, 2]
        assert response.message == "Trending 조회 성공"


class TestBaseSchema:
    """dataclass 결과 -> 응답 스키마 변환"""

    def test_trending_item_from_result(self):
        result = TrendingResult(
            list_id=7,
            title="Weekend Reads",
            slug="weekend-reads",
            score=360.0,
            badge=TrendingBadge.HOT,
            creator_id=10,
            save_count=12,
        )

        item = TrendingItem.model_validate(result)

        assert item.list_id == 7
        assert item.score == 360.0
        assert item.badge == TrendingBadge.HOT
        assert item.save_count == 12
        assert item.is_fast_rising is None
        assert item.model_dump(mode="json")["badge"] == "hot"


class TestErrorResponse:
    """ErrorResponse 테스트"""

    def test_error_response_structure(self):
        """에러 응답 구조 검증"""
        error = ErrorResponse(
            message="랭킹 집계 쿼리에 실패했습니다.",
            error=ErrorDetail(
                code="AGGREGATION_FAILED",
                message="랭킹 집계 쿼리에 실패했습니다.",
                detail={"operation": "count_saves", "reason": "timeout"},
            ),
        )

        assert error.success is False
        assert error.error.code == "AGGREGATION_FAILED"
        assert error.error.detail == {
            "operation": "count_saves",
            "reason": "timeout",
        }
