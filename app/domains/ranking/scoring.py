"""Trending 점수 공식

    score = max(0, (S·4 + C·3 + L·2 + V·0.5 + SaveVelocity·5) / (1 + AgeDays·0.1))

모든 함수는 순수 함수입니다. 입력값의 기본값/클램핑은 호출자가 책임지며
0 나누기는 분모 보정으로 방지합니다.
"""

import math
from typing import Optional

from app.domains.ranking.types import ScoreBreakdown, TrendingBadge, WindowMetrics

SAVE_WEIGHT = 4.0
COMMENT_WEIGHT = 3.0
LIKE_WEIGHT = 2.0
VIEW_WEIGHT = 0.5
VELOCITY_WEIGHT = 5.0
AGE_DECAY = 0.1

VIRAL_THRESHOLD = 600.0
HOT_THRESHOLD = 300.0

FAST_RISING_BOOST = 20.0
FAST_RISING_BOOST_MIN_SAVES = 20
FAST_RISING_FLAG_MIN_SAVES = 5

# 디버그 경고 임계값
VELOCITY_SPIKE = 50.0
LOW_SAVES_FOR_VELOCITY = 3
HIGH_VELOCITY_CONTRIBUTION = 25.0
LIKE_SAVE_RATIO = 5
COMMENT_SAVE_RATIO = 3


def calculate_save_velocity(
    saves: int, days_since_last_save: Optional[float]
) -> float:
    """저장 속도 계산

    0.1일 단위로 올림한 경과 일수(최소 1일)로 나눕니다.
    아주 최근의 단일 저장이 과대평가되지 않도록 하기 위함입니다.

    Args:
        saves: 윈도우 내 저장 수
        days_since_last_save: 마지막 저장 후 경과 일수

    Returns:
        저장 속도 (saves <= 0이면 0)
    """
    if saves <= 0:
        return 0.0

    days = max(0.0, days_since_last_save or 0.0)
    divisor = max(1.0, math.ceil(days * 10) / 10)
    return saves / divisor


def _weighted_terms(metrics: WindowMetrics) -> dict[str, float]:
    return {
        "saves": metrics.saves * SAVE_WEIGHT,
        "comments": metrics.comments * COMMENT_WEIGHT,
        "likes": metrics.likes * LIKE_WEIGHT,
        "views": metrics.views * VIEW_WEIGHT,
        "save_velocity": metrics.save_velocity * VELOCITY_WEIGHT,
    }


def _denominator(age_days: float) -> float:
    return 1.0 + max(0.0, age_days) * AGE_DECAY


def calculate_trending_score(metrics: WindowMetrics) -> float:
    """Trending 점수 계산"""
    numerator = sum(_weighted_terms(metrics).values())
    return max(0.0, numerator / _denominator(metrics.age_days))


def explain_trending_score(metrics: WindowMetrics) -> ScoreBreakdown:
    """점수 분해 + 이상 징후 경고

    관리자 디버그 화면에서 점수가 어떤 항으로 구성되었는지 확인하는 용도입니다.
    """
    terms = _weighted_terms(metrics)
    numerator = sum(terms.values())
    denominator = _denominator(metrics.age_days)
    score = max(0.0, numerator / denominator)

    warnings: list[str] = []
    if metrics.save_velocity > VELOCITY_SPIKE:
        warnings.append("Velocity spike detected")
    if (
        metrics.saves < LOW_SAVES_FOR_VELOCITY
        and terms["save_velocity"] > HIGH_VELOCITY_CONTRIBUTION
    ):
        warnings.append("Low save count but high velocity")
    if metrics.likes > metrics.saves * LIKE_SAVE_RATIO:
        warnings.append("Like/save ratio suspicious")
    if metrics.comments > metrics.saves * COMMENT_SAVE_RATIO:
        warnings.append("Comment/save ratio suspicious")

    return ScoreBreakdown(
        score=score,
        numerator=numerator,
        denominator=denominator,
        terms=terms,
        warnings=warnings,
    )


def get_trending_badge(score: float) -> TrendingBadge:
    """점수 → 배지 (하한 포함)"""
    if score >= VIRAL_THRESHOLD:
        return TrendingBadge.VIRAL
    if score >= HOT_THRESHOLD:
        return TrendingBadge.HOT
    return TrendingBadge.NONE


def apply_fast_rising_boost(score: float, saves_24h: int) -> float:
    """24시간 저장 급증 보너스 (Fast Rising 뷰 전용)"""
    if saves_24h >= FAST_RISING_BOOST_MIN_SAVES:
        return score + FAST_RISING_BOOST
    return score


def is_fast_rising(saves_24h: int) -> bool:
    return saves_24h >= FAST_RISING_FLAG_MIN_SAVES
