"""Featured 슬롯 저장소 인터페이스"""

from datetime import datetime
from typing import Optional, Protocol

from app.domains.featured.types import FeaturedSlotRecord
from app.domains.ranking.types import QueryContext


class FeaturedSlotStore(Protocol):
    async def get_slot(
        self, ctx: QueryContext, slot_id: int
    ) -> Optional[FeaturedSlotRecord]:
        ...

    async def get_slots_started_between(
        self, ctx: QueryContext, start: datetime, end: Optional[datetime] = None
    ) -> list[FeaturedSlotRecord]:
        """start <= start_at < end (end가 None이면 상한 없음), 시작 시각 오름차순"""
        ...

    async def get_active_slots(
        self, ctx: QueryContext
    ) -> list[FeaturedSlotRecord]:
        ...

    async def get_recent_slots(
        self, ctx: QueryContext, limit: int
    ) -> list[FeaturedSlotRecord]:
        """시작 시각 내림차순 최근 슬롯"""
        ...

    async def get_last_featured_at(
        self, ctx: QueryContext
    ) -> dict[int, datetime]:
        """리스트별 마지막 노출 시각 (end_at, 없으면 start_at)"""
        ...

    async def get_scheduled_list_ids(self, ctx: QueryContext) -> set[int]:
        """현재 노출 중이거나 앞으로 예약된 리스트 id"""
        ...

    async def upsert_featured_slot_score_snapshot(
        self,
        ctx: QueryContext,
        slot_id: int,
        baseline_score: Optional[float] = None,
        peak_score: Optional[float] = None,
        baseline_saves: Optional[int] = None,
    ) -> bool:
        """baseline은 최초 값 유지, peak는 최대값으로만 갱신

        종료된 슬롯에는 적용되지 않으며, 갱신 여부를 반환합니다.
        """
        ...
