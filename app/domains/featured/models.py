"""Featured 도메인 모델 정의"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class FeaturedSlot(Base):
    """홈 Featured 슬롯 모델

    생명주기:
        - 생성 시 baseline_saves / baseline_score / peak_score 스냅샷 기록
        - 활성 기간 동안 impressions / clicks / saves_during (메인 서버)
          및 peak_score (랭킹 엔진) 갱신
        - end_at 이후에는 변경되지 않음
    """

    __tablename__ = "home_featured_slots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="슬롯 ID")
    list_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=False,
        comment="노출 리스트 ID",
    )
    start_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, comment="노출 시작 일시"
    )
    end_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="노출 종료 일시 (NULL이면 무기한)",
    )
    impressions: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    clicks: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    baseline_saves: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True, comment="노출 시작 시점 저장 수"
    )
    saves_during: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="노출 기간 중 저장 수",
    )
    baseline_score: Mapped[Optional[float]] = mapped_column(
        Float, nullable=True, comment="노출 시작 시점 Trending 점수"
    )
    peak_score: Mapped[Optional[float]] = mapped_column(
        Float, nullable=True, comment="노출 기간 중 최고 Trending 점수"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    __table_args__ = (Index("ix_home_featured_slots_start_at", "start_at"),)

    def __repr__(self) -> str:
        return (
            f"<FeaturedSlot(id={self.id}, list_id={self.list_id}, "
            f"start_at={self.start_at}, end_at={self.end_at})>"
        )
