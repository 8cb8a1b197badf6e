"""Featured 도메인 리포지토리"""

from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import Select, func, or_, select, update

from app.core.logging import get_logger
from app.domains.featured.models import FeaturedSlot
from app.domains.featured.types import FeaturedSlotRecord
from app.domains.lists.models import Category, CuratedList
from app.domains.ranking.repository import QueryRunner
from app.domains.ranking.types import QueryContext

logger = get_logger(__name__)


class FeaturedSlotRepository(QueryRunner):
    """Featured 슬롯 리포지토리"""

    @staticmethod
    def _record_query() -> Select:
        return (
            select(
                FeaturedSlot,
                CuratedList.title,
                CuratedList.save_count,
                CuratedList.category_id,
                Category.name,
            )
            .outerjoin(CuratedList, FeaturedSlot.list_id == CuratedList.id)
            .outerjoin(Category, CuratedList.category_id == Category.id)
            # 스냅샷 UPDATE 직후 재조회 시 세션 캐시 대신 DB 값 사용
            .execution_options(populate_existing=True)
        )

    @staticmethod
    def _to_records(rows: Sequence[Any]) -> list[FeaturedSlotRecord]:
        return [
            FeaturedSlotRecord(
                id=slot.id,
                list_id=slot.list_id,
                start_at=slot.start_at,
                end_at=slot.end_at,
                impressions=slot.impressions or 0,
                clicks=slot.clicks or 0,
                baseline_saves=slot.baseline_saves,
                saves_during=slot.saves_during or 0,
                baseline_score=slot.baseline_score,
                peak_score=slot.peak_score,
                list_title=title,
                list_save_count=save_count or 0,
                category_id=category_id,
                category_name=category_name,
            )
            for slot, title, save_count, category_id, category_name in rows
        ]

    def _active_condition(self, now: datetime) -> Any:
        return (FeaturedSlot.start_at <= now) & or_(
            FeaturedSlot.end_at.is_(None), FeaturedSlot.end_at > now
        )

    async def get_slot(
        self, ctx: QueryContext, slot_id: int
    ) -> Optional[FeaturedSlotRecord]:
        stmt = self._record_query().where(FeaturedSlot.id == slot_id)
        result = await self._execute(ctx, stmt, "featured_slot")
        records = self._to_records(result.all())
        return records[0] if records else None

    async def get_slots_started_between(
        self, ctx: QueryContext, start: datetime, end: Optional[datetime] = None
    ) -> list[FeaturedSlotRecord]:
        stmt = self._record_query().where(FeaturedSlot.start_at >= start)
        if end is not None:
            stmt = stmt.where(FeaturedSlot.start_at < end)
        stmt = stmt.order_by(FeaturedSlot.start_at, FeaturedSlot.id)

        result = await self._execute(ctx, stmt, "featured_slots_between")
        return self._to_records(result.all())

    async def get_active_slots(
        self, ctx: QueryContext
    ) -> list[FeaturedSlotRecord]:
        stmt = (
            self._record_query()
            .where(self._active_condition(ctx.now))
            .order_by(FeaturedSlot.start_at.desc(), FeaturedSlot.id)
        )
        result = await self._execute(ctx, stmt, "featured_active_slots")
        return self._to_records(result.all())

    async def get_recent_slots(
        self, ctx: QueryContext, limit: int
    ) -> list[FeaturedSlotRecord]:
        stmt = (
            self._record_query()
            .where(FeaturedSlot.start_at <= ctx.now)
            .order_by(FeaturedSlot.start_at.desc(), FeaturedSlot.id.desc())
            .limit(limit)
        )
        result = await self._execute(ctx, stmt, "featured_recent_slots")
        return self._to_records(result.all())

    async def get_last_featured_at(
        self, ctx: QueryContext
    ) -> dict[int, datetime]:
        last = func.max(func.coalesce(FeaturedSlot.end_at, FeaturedSlot.start_at))
        stmt = select(FeaturedSlot.list_id, last).group_by(FeaturedSlot.list_id)
        result = await self._execute(ctx, stmt, "featured_last_at")
        return {list_id: at for list_id, at in result.all()}

    async def get_scheduled_list_ids(self, ctx: QueryContext) -> set[int]:
        stmt = select(FeaturedSlot.list_id).where(
            or_(
                self._active_condition(ctx.now),
                FeaturedSlot.start_at > ctx.now,
            )
        )
        result = await self._execute(ctx, stmt, "featured_scheduled_lists")
        return set(result.scalars().all())

    async def upsert_featured_slot_score_snapshot(
        self,
        ctx: QueryContext,
        slot_id: int,
        baseline_score: Optional[float] = None,
        peak_score: Optional[float] = None,
        baseline_saves: Optional[int] = None,
    ) -> bool:
        """점수 스냅샷 기록 (단일 UPDATE)

        - baseline_*: COALESCE로 기존 값이 없을 때만 기록
        - peak_score: GREATEST로 더 클 때만 갱신
        - end_at이 지난 슬롯은 갱신하지 않음
        """
        values: dict[str, Any] = {}
        if baseline_saves is not None:
            values["baseline_saves"] = func.coalesce(
                FeaturedSlot.baseline_saves, baseline_saves
            )
        if baseline_score is not None:
            values["baseline_score"] = func.coalesce(
                FeaturedSlot.baseline_score, baseline_score
            )
        if peak_score is not None:
            values["peak_score"] = func.greatest(
                func.coalesce(FeaturedSlot.peak_score, peak_score), peak_score
            )
        if not values:
            return False

        stmt = (
            update(FeaturedSlot)
            .where(
                FeaturedSlot.id == slot_id,
                or_(FeaturedSlot.end_at.is_(None), FeaturedSlot.end_at > ctx.now),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(ctx, stmt, "featured_score_snapshot")
        updated = bool(result.rowcount)

        logger.debug(
            f"Featured slot {slot_id} snapshot "
            f"{'updated' if updated else 'skipped'}: {sorted(values)}"
        )
        return updated
