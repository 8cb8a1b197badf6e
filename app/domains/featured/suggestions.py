"""Featured 로테이션 / 후보 제안 점수

같은 카테고리가 연속으로 노출되지 않도록 최근 슬롯 기준으로
카테고리별 보정값을 계산하고, 후보 리스트의 제안 점수에 반영합니다.

    base = min(trending/5, 100)·0.4 + min(velocity, 100)·0.2
         + min(categoryImpact, 100)·0.2 + min(S7·2, 100)·0.2
    suggestion = max(0, base × (1 + rotationModifier))
"""

from collections import Counter
from typing import Optional, Sequence

from app.domains.featured.analytics import UNCATEGORIZED_NAME
from app.domains.featured.types import (
    CategoryRotationStat,
    FeaturedSlotRecord,
    RotationInsight,
)
from app.domains.ranking.types import CategoryInfo

PENALTY_OVEREXPOSED = -0.3
BOOST_NOT_FEATURED = 0.3
PENALTY_LAST_SLOT = -0.2

HIGH_TRENDING = 300
GOOD_TRENDING = 150
FAST_VELOCITY = 50
STRONG_WEEKLY_SAVES = 20
STRONG_CATEGORY_IMPACT = 50


def rotation_modifier(recent_count: int, in_last_slot: bool) -> float:
    modifier = 0.0
    if recent_count >= 2:
        modifier += PENALTY_OVEREXPOSED
    if recent_count == 0:
        modifier += BOOST_NOT_FEATURED
    if in_last_slot:
        modifier += PENALTY_LAST_SLOT
    return modifier


def build_rotation_insight(
    recent_slots: Sequence[FeaturedSlotRecord],
    categories: Sequence[CategoryInfo],
) -> RotationInsight:
    """최근 슬롯(시작 시각 내림차순)과 활성 카테고리로 로테이션 분석"""
    if not recent_slots:
        return RotationInsight(
            category_stats=[],
            suggested_category=None,
            suggested_category_id=None,
            reasoning="No featured slots recorded yet.",
        )

    counts = Counter(s.category_id for s in recent_slots)
    last_category = recent_slots[0].category_id
    slot_names = {
        s.category_id: s.category_name or UNCATEGORIZED_NAME
        for s in reversed(recent_slots)
    }

    def stat(category_id: Optional[int], name: str) -> CategoryRotationStat:
        count = counts.get(category_id, 0)
        in_last = category_id == last_category and count > 0
        return CategoryRotationStat(
            category_id=category_id,
            name=name,
            recent_count=count,
            in_last_slot=in_last,
            rotation_modifier=rotation_modifier(count, in_last),
        )

    stats = [stat(c.id, c.name) for c in categories]
    known = {c.id for c in categories}
    # 비활성/삭제된 카테고리라도 최근 슬롯에 있었다면 포함
    stats.extend(
        stat(category_id, name)
        for category_id, name in slot_names.items()
        if category_id not in known
    )

    candidates = [s for s in stats if s.recent_count <= 1]
    best = max(candidates, key=lambda s: s.rotation_modifier, default=None)

    overexposed = [s for s in stats if s.recent_count >= 2]
    not_featured = [s for s in stats if s.recent_count == 0]
    if overexposed and not_featured:
        over_names = ", ".join(f"{s.name} ({s.recent_count}x)" for s in overexposed)
        fresh_names = ", ".join(s.name for s in not_featured)
        reasoning = (
            f"In the last {len(recent_slots)} slots, {over_names} were featured. "
            f"Consider featuring {fresh_names} this week."
        )
    elif best is not None:
        reasoning = f"Suggestion: feature the '{best.name}' category this week."
    else:
        reasoning = "Category variety has been maintained in recent slots."

    return RotationInsight(
        category_stats=stats,
        suggested_category=best.name if best else None,
        suggested_category_id=best.category_id if best else None,
        reasoning=reasoning,
    )


def suggestion_score(
    trending_score: float,
    save_velocity: float,
    category_impact: float,
    saves_7d: int,
    modifier: float = 0.0,
) -> float:
    base = (
        min(trending_score / 5, 100) * 0.4
        + min(save_velocity, 100) * 0.2
        + min(category_impact, 100) * 0.2
        + min(saves_7d * 2, 100) * 0.2
    )
    return max(0.0, base * (1 + modifier))


def suggestion_reasons(
    trending_score: float,
    save_velocity: float,
    saves_7d: int,
    category_impact: float,
    modifier: float,
) -> list[str]:
    reasons = []
    if trending_score >= HIGH_TRENDING:
        reasons.append("High trending score")
    elif trending_score >= GOOD_TRENDING:
        reasons.append("Good trending score")
    if save_velocity >= FAST_VELOCITY:
        reasons.append("Fast save growth in the last 7 days")
    if saves_7d >= STRONG_WEEKLY_SAVES:
        reasons.append(f"Strong 7-day growth (+{saves_7d} saves)")
    if category_impact >= STRONG_CATEGORY_IMPACT:
        reasons.append("This category performs well when featured")
    reasons.append("Not featured for a long time")
    if modifier > 0:
        reasons.append("This category has not been featured recently")
    elif modifier < 0:
        reasons.append("This category has been featured several times recently")
    return reasons
