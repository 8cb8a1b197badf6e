"""윈도우 지표 집계기

후보 id 집합 전체에 대해 지표 종류별로 한 번씩만 조회합니다.
(저장 수, 좋아요 수, 댓글 수, 마지막 저장 시각, 생성 시각)
"""

from datetime import datetime
from typing import Mapping, Optional, Sequence

from app.core.logging import get_logger
from app.core.utils.datetime import days_between
from app.domains.ranking.scoring import calculate_save_velocity
from app.domains.ranking.store import EngagementStore
from app.domains.ranking.types import EngagementKind, QueryContext, WindowMetrics

logger = get_logger(__name__)

DEFAULT_WINDOW_DAYS = 7


class MetricsAggregator:
    """배치 윈도우 지표 집계기"""

    def __init__(self, store: EngagementStore):
        self.store = store

    async def aggregate(
        self,
        ctx: QueryContext,
        entity_ids: Sequence[int],
        window_days: float = DEFAULT_WINDOW_DAYS,
        created_at: Optional[Mapping[int, Optional[datetime]]] = None,
    ) -> dict[int, WindowMetrics]:
        """id별 WindowMetrics 생성

        활동이 없는 id도 0으로 채운 항목을 받습니다.

        Args:
            ctx: 요청 컨텍스트 (ctx.now 기준으로 윈도우 계산)
            entity_ids: 대상 리스트 id
            window_days: 윈도우 길이 (7 기본, Fast Rising 1, Monthly 30)
            created_at: 이미 조회한 생성 시각 (없으면 스냅샷 조회)

        Returns:
            {list_id: WindowMetrics}
        """
        ids = list(dict.fromkeys(entity_ids))
        if not ids:
            return {}

        since = ctx.since(window_days)

        saves = await self.store.get_engagement_counts(
            ctx, ids, EngagementKind.SAVE, since
        )
        likes = await self.store.get_engagement_counts(
            ctx, ids, EngagementKind.LIKE, since
        )
        comments = await self.store.get_engagement_counts(
            ctx, ids, EngagementKind.COMMENT, since
        )
        last_saves = await self.store.get_last_activity_timestamps(
            ctx, ids, EngagementKind.SAVE, since
        )

        if created_at is None:
            snapshots = await self.store.get_entity_snapshots(ctx, ids)
            created_at = {i: s.created_at for i, s in snapshots.items()}

        result: dict[int, WindowMetrics] = {}
        for entity_id in ids:
            s = saves.get(entity_id, 0)
            last_save = last_saves.get(entity_id)
            days_since_last_save = (
                max(0.0, days_between(last_save, ctx.now))
                if last_save is not None
                else window_days + 1
            )
            created = created_at.get(entity_id)
            age_days = (
                max(0.0, days_between(created, ctx.now)) if created else 0.0
            )

            result[entity_id] = WindowMetrics(
                saves=s,
                likes=likes.get(entity_id, 0),
                comments=comments.get(entity_id, 0),
                views=0,
                age_days=age_days,
                save_velocity=calculate_save_velocity(s, days_since_last_save),
                days_since_last_save=days_since_last_save,
                window_days=window_days,
            )

        logger.debug(
            f"Aggregated {window_days}d metrics for {len(ids)} lists "
            f"(active: {sum(1 for v in saves.values() if v > 0)})"
        )
        return result
