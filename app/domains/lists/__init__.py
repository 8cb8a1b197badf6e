"""Lists 도메인 모듈

큐레이션 리스트와 참여 이벤트 테이블의 SQLAlchemy 매핑입니다.
랭킹 엔진의 저장소 어댑터가 이 모델들을 집계 조회합니다.
"""

from app.domains.lists.models import (
    Bookmark,
    Category,
    CommentStatus,
    CreatorRanking,
    CuratedList,
    Follow,
    ListComment,
    ListItem,
    ListLike,
)

__all__ = [
    "Category",
    "CuratedList",
    "ListItem",
    "Bookmark",
    "ListLike",
    "ListComment",
    "CommentStatus",
    "Follow",
    "CreatorRanking",
]
