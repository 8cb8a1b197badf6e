"""Lists 도메인 모델 정의

큐레이션 리스트와 참여 이벤트(저장/좋아요/댓글/팔로우) 테이블입니다.
스키마와 카운터 갱신은 플랫폼 메인 서버가 소유하며,
랭킹 엔진은 이 테이블들을 집계 조회만 합니다.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    ARRAY,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class CommentStatus:
    """댓글 상태 값"""

    ACTIVE = "active"
    HIDDEN = "hidden"
    DELETED = "deleted"


class Category(Base):
    """카테고리 모델"""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="카테고리 ID")
    slug: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, comment="카테고리 슬러그"
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, comment="카테고리 이름")
    icon: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True, comment="아이콘"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="삭제 일시 (Soft Delete)"
    )


class CuratedList(Base):
    """큐레이션 리스트 모델

    save_count/like_count/view_count/item_count는 메인 서버가 유지하는
    비정규화 카운터입니다.
    """

    __tablename__ = "lists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="리스트 ID")
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="작성자(크리에이터) ID",
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        comment="카테고리 ID",
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False, comment="제목")
    slug: Mapped[str] = mapped_column(String(300), nullable=False, comment="슬러그")
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    tags: Mapped[list[str]] = mapped_column(
        ARRAY(String),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
        comment="태그 목록",
    )
    save_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    like_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    view_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    item_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="생성 일시",
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, comment="삭제 일시 (Soft Delete)"
    )

    __table_args__ = (
        Index("ix_lists_category_saves", "category_id", "save_count"),
        Index("ix_lists_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<CuratedList(id={self.id}, category_id={self.category_id}, "
            f"save_count={self.save_count})>"
        )


class ListItem(Base):
    """리스트 아이템 (유사도 계산에는 제목만 사용)"""

    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lists.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (Index("ix_items_list_id", "list_id"),)


class Bookmark(Base):
    """리스트 저장(북마크) 이벤트"""

    __tablename__ = "bookmarks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lists.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "list_id", name="uq_bookmarks_user_list"),
        Index("ix_bookmarks_list_created", "list_id", "created_at"),
    )


class ListLike(Base):
    """리스트 좋아요 이벤트"""

    __tablename__ = "list_likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lists.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "list_id", name="uq_list_likes_user_list"),
        Index("ix_list_likes_list_created", "list_id", "created_at"),
    )


class ListComment(Base):
    """리스트 댓글 (승인된 active 댓글만 집계)"""

    __tablename__ = "list_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    list_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lists.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CommentStatus.ACTIVE,
        server_default=CommentStatus.ACTIVE,
    )
    is_approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_list_comments_list_created", "list_id", "created_at"),
    )


class Follow(Base):
    """크리에이터 팔로우 관계"""

    __tablename__ = "follows"

    follower_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    following_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class CreatorRanking(Base):
    """크리에이터 랭킹 스냅샷 (외부 배치가 주기적으로 갱신)"""

    __tablename__ = "creator_rankings"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        comment="크리에이터 ID",
    )
    influence_score: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, server_default="0"
    )
    momentum_score: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, server_default="0"
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )
