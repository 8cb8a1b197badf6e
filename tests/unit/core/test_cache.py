"""ScoreCache 단위 테스트"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core import cache as cache_module
from app.core.cache import ScoreCache


@pytest.fixture
def redis_client():
    return AsyncMock()


class TestScoreCache:
    """Redis JSON 캐시 테스트"""

    @pytest.mark.asyncio
    async def test_get_json_hit(self, redis_client):
        """Given: 저장된 JSON / When: 조회 / Then: 역직렬화된 값 반환"""
        redis_client.get.return_value = json.dumps([{"list_id": 1}])
        cache = ScoreCache(redis_client)

        result = await cache.get_json("trending:global:6")

        assert result == [{"list_id": 1}]
        redis_client.get.assert_awaited_once_with("ranking:trending:global:6")

    @pytest.mark.asyncio
    async def test_get_json_miss(self, redis_client):
        redis_client.get.return_value = None
        cache = ScoreCache(redis_client)

        assert await cache.get_json("spotlight:1") is None

    @pytest.mark.asyncio
    async def test_get_json_redis_error_is_miss(self, redis_client):
        """Redis 장애는 캐시 미스로 처리"""
        redis_client.get.side_effect = RedisConnectionError("down")
        cache = ScoreCache(redis_client)

        assert await cache.get_json("spotlight:1") is None

    @pytest.mark.asyncio
    async def test_set_json_with_ttl(self, redis_client):
        cache = ScoreCache(redis_client)

        await cache.set_json("spotlight:1", {"score": 0.5}, 86400)

        redis_client.set.assert_awaited_once_with(
            "ranking:spotlight:1", json.dumps({"score": 0.5}), ex=86400
        )

    @pytest.mark.asyncio
    async def test_set_json_redis_error_does_not_raise(self, redis_client):
        """쓰기 실패는 경고만 남김"""
        redis_client.set.side_effect = RedisConnectionError("down")
        cache = ScoreCache(redis_client)

        await cache.set_json("spotlight:1", {"score": 0.5}, 60)


class TestInitCache:
    """캐시 초기화 테스트"""

    @pytest.mark.asyncio
    async def test_unreachable_redis_leaves_cache_disabled(self, redis_client):
        """Given: ping 실패 / When: 초기화 / Then: 예외 없이 캐시 None"""
        redis_client.ping.side_effect = RedisConnectionError("refused")

        with (
            patch.object(cache_module.settings, "cache_enabled", True),
            patch.object(cache_module, "_cache", None),
            patch.object(
                cache_module.aioredis, "from_url", return_value=redis_client
            ),
        ):
            await cache_module.init_cache()

            assert cache_module.get_score_cache() is None

        redis_client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reachable_redis_enables_cache(self, redis_client):
        with (
            patch.object(cache_module.settings, "cache_enabled", True),
            patch.object(cache_module, "_cache", None),
            patch.object(
                cache_module.aioredis, "from_url", return_value=redis_client
            ),
        ):
            await cache_module.init_cache()

            cache = cache_module.get_score_cache()
            assert isinstance(cache, ScoreCache)
            assert cache.client is redis_client
