"""요청 ID 컨텍스트 관리

서비스/레포지토리 로그에서 같은 요청의 집계 쿼리를 묶어 보기 위해 사용합니다.
"""

import contextvars
import uuid
from typing import Optional

request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


def get_request_id() -> Optional[str]:
    """현재 요청 ID 반환 (요청 밖에서는 None)"""
    return request_id_ctx.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """요청 ID 설정 (헤더에 없으면 새로 생성)"""
    if not request_id:
        request_id = uuid.uuid4().hex
    request_id_ctx.set(request_id)
    return request_id
