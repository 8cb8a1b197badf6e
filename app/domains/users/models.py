"""Users 도메인 모델 정의

플랫폼 사용자(일반 사용자 및 큐레이터)의 조회 전용 투영입니다.
ID는 플랫폼 메인 서버에서 제공되며, 자동 증가하지 않습니다.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class UserRole(str, Enum):
    """사용자 역할"""

    USER = "USER"
    CURATOR = "CURATOR"
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"


class User(Base):
    """사용자 모델

    랭킹 엔진은 크리에이터 자격(역할/활성 여부)과 프로필 표시 정보만 사용합니다.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=False,
        comment="플랫폼에서 제공하는 사용자 ID",
    )
    username: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, unique=True, comment="사용자명"
    )
    name: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, comment="표시 이름"
    )
    image: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True, comment="프로필 이미지 URL"
    )
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UserRole.USER.value,
        server_default=UserRole.USER.value,
        comment="역할 (USER/CURATOR/EDITOR/ADMIN)",
    )
    curator_level: Mapped[Optional[str]] = mapped_column(
        String(30), nullable=True, comment="큐레이터 레벨"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
        comment="활성 여부",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="생성 일시",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role={self.role}, active={self.is_active})>"
