"""유사 리스트 서비스"""

from typing import Optional, Sequence

from app.core.logging import get_logger
from app.domains.ranking.exceptions import ListNotFoundException
from app.domains.ranking.similarity.strategies import (
    SimilarityStrategy,
    default_strategies,
)
from app.domains.ranking.store import EngagementStore
from app.domains.ranking.types import QueryContext, SimilarList

logger = get_logger(__name__)

TOP_N = 4


class SimilarityService:
    """전략 체인으로 유사 리스트를 찾는 서비스

    전략을 순서대로 실행하며, 기준 리스트와 이미 선택된 리스트는
    다음 전략에서 제외합니다. 모든 전략이 소진되어도 결과가 부족하면
    있는 만큼만 반환합니다. (빈 결과도 정상)
    """

    def __init__(
        self,
        store: EngagementStore,
        strategies: Optional[Sequence[SimilarityStrategy]] = None,
        top_n: int = TOP_N,
    ):
        self.store = store
        self.strategies = (
            list(strategies)
            if strategies is not None
            else default_strategies(store)
        )
        self.top_n = top_n

    async def get_top_similar_lists(
        self, ctx: QueryContext, list_id: int
    ) -> list[SimilarList]:
        """유사 리스트 최대 top_n개

        Raises:
            ListNotFoundException: 기준 리스트가 없는 경우
        """
        source = await self.store.get_similarity_source(ctx, list_id)
        if source is None:
            raise ListNotFoundException(list_id=list_id)

        picked: list[SimilarList] = []
        excluded = {source.id}

        for strategy in self.strategies:
            need = self.top_n - len(picked)
            if need <= 0:
                break

            found = await strategy.collect(ctx, source, need, frozenset(excluded))
            added = 0
            for item in found:
                if item.id in excluded or len(picked) >= self.top_n:
                    continue
                picked.append(item)
                excluded.add(item.id)
                added += 1

            logger.debug(
                f"Similarity[{list_id}] {strategy.name}: "
                f"{len(found)} found, {added} added"
            )

        return picked
