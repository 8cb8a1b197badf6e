"""요청/응답 로깅 미들웨어"""

from typing import Callable, cast

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import get_logger
from app.core.middlewares.context import set_request_id
from app.core.utils.time import measure_time

logger = get_logger(__name__)

EXCLUDE_PATHS = {"/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico"}


class LoggingMiddleware(BaseHTTPMiddleware):
    """요청 ID 부여, 처리 시간 측정 및 요청 로그 기록"""

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        if request.url.path in EXCLUDE_PATHS:
            return cast(Response, await call_next(request))

        request_id = set_request_id(request.headers.get("X-Request-ID"))
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        with measure_time() as timer:
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    f"[{request_id}] {request.method} {target} "
                    f"| Error: {e} | Time: {timer['elapsed_ms']:.2f}ms"
                )
                raise

        elapsed = timer["elapsed_ms"]
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.2f}ms"

        # 5xx(집계 실패 포함)는 warning
        log_method = (
            logger.info if response.status_code < 500 else logger.warning
        )
        log_method(
            f"[{request_id}] {request.method} {target} "
            f"| Status: {response.status_code} | Time: {elapsed:.2f}ms"
        )

        return cast(Response, response)
