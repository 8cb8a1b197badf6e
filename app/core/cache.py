"""점수 스냅샷 캐시 (Redis)

Trending 뷰와 Spotlight 결과를 JSON 문자열로 저장합니다.

Key 규칙::

    ranking:trending:{view}:{params}   → TrendingResult 목록
    ranking:spotlight:{user_id}        → SpotlightResult

캐시는 가속 장치일 뿐이므로 Redis 장애 시 경고 로그를 남기고
캐시 미스로 취급합니다. (재계산 경로는 항상 유효)
"""

import json
from typing import Any, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class ScoreCache:
    """Redis 기반 JSON 캐시"""

    def __init__(self, client: aioredis.Redis, prefix: str = "ranking:"):
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get_json(self, key: str) -> Optional[Any]:
        """캐시 조회 (없거나 Redis 장애 시 None)"""
        try:
            raw = await self.client.get(self._key(key))
        except RedisError as e:
            logger.warning(f"Cache read failed for '{key}': {e}")
            return None

        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        """캐시 저장 (TTL 초 단위)"""
        try:
            await self.client.set(
                self._key(key), json.dumps(value, default=str), ex=ttl_seconds
            )
        except RedisError as e:
            logger.warning(f"Cache write failed for '{key}': {e}")

    async def close(self) -> None:
        await self.client.aclose()


_cache: Optional[ScoreCache] = None


async def init_cache() -> None:
    """Redis 연결 초기화 (cache_enabled=False면 건너뜀)"""
    global _cache
    if not settings.cache_enabled:
        logger.info("Score cache disabled")
        return

    client = aioredis.from_url(settings.redis_url, decode_responses=True)
    try:
        await client.ping()
    except RedisError as e:
        logger.warning(
            f"Score cache unavailable ({settings.redis_url}): {e}; "
            "serving without cache"
        )
        await client.aclose()
        return

    _cache = ScoreCache(client)
    logger.info(f"Score cache connected: {settings.redis_url}")


async def close_cache() -> None:
    global _cache
    if _cache is not None:
        await _cache.close()
        _cache = None


def get_score_cache() -> Optional[ScoreCache]:
    """캐시 의존성 (비활성화 상태면 None)"""
    return _cache
