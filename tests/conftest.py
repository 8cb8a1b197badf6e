"""테스트 설정"""

import os
from datetime import datetime
from typing import Generator

import pytest
import pytest_asyncio
from docker import from_env
from docker.errors import DockerException
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from app.core.cache import get_score_cache
from app.core.config import settings
from app.core.database import Base, get_db
from app.core.utils.datetime import UTC
from app.domains.ranking.types import QueryContext
from app.main import app
from tests.fakes import (
    InMemoryEngagementStore,
    InMemoryFeaturedSlotStore,
    InMemoryScoreCache,
)

# 모든 시간 윈도우의 기준 시각 (벽시계에 의존하지 않음)
FIXED_NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


def _is_docker_available() -> bool:
    """로컬 환경에서 Docker 접근 가능 여부 확인"""
    if os.getenv("FORCE_DOCKER_TESTS", "").lower() in {"1", "true"}:
        return True
    if os.getenv("SKIP_DOCKER_TESTS", "").lower() in {"1", "true"}:
        return False

    try:
        client = from_env()
        client.ping()
        return True
    except DockerException:
        return False


DOCKER_AVAILABLE = _is_docker_available()


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def ctx() -> QueryContext:
    """고정 시각, 데드라인 없음, 캐시 사용"""
    return QueryContext.create(now=FIXED_NOW)


@pytest.fixture
def store() -> InMemoryEngagementStore:
    return InMemoryEngagementStore()


@pytest.fixture
def featured_store() -> InMemoryFeaturedSlotStore:
    return InMemoryFeaturedSlotStore()


@pytest.fixture
def cache() -> InMemoryScoreCache:
    return InMemoryScoreCache()


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """PostgreSQL 테스트 컨테이너"""
    if not DOCKER_AVAILABLE:
        pytest.skip("Docker is not available; skipping container-based tests.")

    with PostgresContainer("postgres:16-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def test_database_url(postgres_container: PostgresContainer) -> str:
    """테스트 데이터베이스 URL"""
    # asyncpg를 위한 URL 생성
    return str(
        postgres_container.get_connection_url().replace(
            "postgresql+psycopg2://", "postgresql+asyncpg://"
        )
    )


@pytest_asyncio.fixture
async def db_session(test_database_url: str):
    """테스트 데이터베이스 세션"""
    engine = create_async_engine(test_database_url, echo=False)

    # 각 테스트마다 깨끗한 스키마 유지
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    await engine.dispose()


# NOTE:
# pytest-asyncio는 테스트마다 독립적인 event loop를 생성하므로
# async fixture는 모두 function 스코프로 유지
@pytest_asyncio.fixture
async def client():
    """비동기 테스트 클라이언트

    DB 세션은 사용하지 않으며, 각 테스트가 서비스/저장소 의존성을
    app.dependency_overrides로 교체합니다.
    """

    async def override_get_db():
        yield None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_score_cache] = lambda: None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    # 정리
    app.dependency_overrides.clear()


@pytest.fixture
def api_key_header():
    """Internal API Key 헤더"""
    return {"X-Internal-Api-Key": settings.internal_api_key}
