"""날짜/시간 유틸리티

랭킹 계산은 항상 명시적인 기준 시각(`now`)을 받아 윈도우를 계산합니다.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

UTC = timezone.utc

SECONDS_PER_DAY = 86400.0


def now_utc() -> datetime:
    """현재 UTC 시간 반환"""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """naive datetime은 UTC로 간주하여 tz 정보를 붙임"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def start_of_day(dt: Optional[datetime] = None) -> datetime:
    """해당 날짜의 시작 시간 (00:00:00)"""
    if dt is None:
        dt = now_utc()
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def days_ago(days: float, now: Optional[datetime] = None) -> datetime:
    """기준 시각으로부터 n일 전 시간 반환"""
    base = now if now is not None else now_utc()
    return base - timedelta(days=days)


def days_between(start: datetime, end: datetime) -> float:
    """두 시각 사이의 경과 일수 (소수점 포함)"""
    delta = ensure_utc(end) - ensure_utc(start)
    return delta.total_seconds() / SECONDS_PER_DAY
