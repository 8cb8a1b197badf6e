"""API v1 라우터"""

from typing import Any

from fastapi import APIRouter

from app.core.schemas import APIResponse
from app.domains.featured.router import router as featured_router
from app.domains.ranking.router import (
    discovery_router,
    lists_router,
    trending_router,
)

api_router = APIRouter()

# 도메인 라우터 등록
api_router.include_router(trending_router, prefix="/trending", tags=["Trending"])
api_router.include_router(lists_router, prefix="/lists", tags=["Similar Lists"])
api_router.include_router(
    discovery_router, prefix="/discovery", tags=["Discovery"]
)
api_router.include_router(featured_router, prefix="/featured", tags=["Featured"])


@api_router.get("/", response_model=APIResponse[dict[str, Any]])
async def api_v1_root():
    """API v1 루트 엔드포인트"""
    return APIResponse(
        success=True,
        message="Curation Ranking Engine API v1",
        data={
            "version": "1.0.0",
            "docs": "/docs",
        },
    )
