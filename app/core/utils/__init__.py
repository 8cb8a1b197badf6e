"""유틸리티 모듈"""

from app.core.utils.datetime import (
    UTC,
    days_ago,
    days_between,
    ensure_utc,
    now_utc,
    start_of_day,
)
from app.core.utils.time import measure_time

__all__ = [
    # datetime
    "UTC",
    "now_utc",
    "ensure_utc",
    "start_of_day",
    "days_ago",
    "days_between",
    # time measurement
    "measure_time",
]
