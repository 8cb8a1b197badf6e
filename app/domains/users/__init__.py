"""Users 도메인 모듈

플랫폼 사용자 테이블의 조회 전용 매핑입니다. 크리에이터 자격(역할)과
프로필 표시 정보에 사용됩니다.
"""

from app.domains.users.models import User, UserRole

__all__ = ["User", "UserRole"]
