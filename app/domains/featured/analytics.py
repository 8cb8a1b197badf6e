"""Featured 성과 분석

슬롯 단위 지표(CTR, Save Lift, Score Lift)와 규칙 기반 추천 문구를
계산하는 순수 함수 모음입니다.

    ctr = clicks / impressions
    save_lift = saves_during / baseline_saves × 100
    score_lift = (peak_score - baseline_score) / baseline_score × 100
"""

from collections import defaultdict
from datetime import datetime
from typing import Optional, Sequence

from app.domains.featured.types import (
    BestPerformer,
    CategoryInsightRow,
    CategoryInsights,
    FeaturedPerformance,
    FeaturedSlotRecord,
    ImpactLabel,
    SlotPerformanceRow,
    WeeklyReport,
)

UNCATEGORIZED_NAME = "Uncategorized"
UNTITLED = "-"

# 임팩트 라벨 기준
HIGH_IMPACT_CTR = 0.15
HIGH_IMPACT_SAVE_LIFT = 150
MODERATE_CTR = 0.08
MODERATE_SAVE_LIFT = 80

# 카테고리 임팩트 점수 가중치
CATEGORY_LIFT_WEIGHT = 0.6
CATEGORY_CTR_WEIGHT = 0.4
WEAK_CATEGORY_IMPACT = 20


def calculate_ctr(impressions: int, clicks: int) -> float:
    return clicks / impressions if impressions > 0 else 0.0


def calculate_save_lift(
    saves_during: int, baseline_saves: Optional[int]
) -> Optional[float]:
    if baseline_saves is None or baseline_saves <= 0:
        return None
    return saves_during / baseline_saves * 100


def calculate_score_lift(
    baseline_score: Optional[float], peak_score: Optional[float]
) -> Optional[float]:
    if baseline_score is None or baseline_score <= 0 or peak_score is None:
        return None
    return (peak_score - baseline_score) / baseline_score * 100


def get_impact_label(ctr: float, save_lift: Optional[float]) -> ImpactLabel:
    if (
        ctr >= HIGH_IMPACT_CTR
        and save_lift is not None
        and save_lift >= HIGH_IMPACT_SAVE_LIFT
    ):
        return ImpactLabel.HIGH
    if ctr >= MODERATE_CTR or (
        save_lift is not None and save_lift >= MODERATE_SAVE_LIFT
    ):
        return ImpactLabel.MODERATE
    return ImpactLabel.LOW


def slot_recommendations(
    ctr: float, save_lift: Optional[float], score_lift: Optional[float]
) -> list[str]:
    """슬롯 단위 추천 문구"""
    out = []
    if ctr > 0.18 and save_lift is not None and save_lift > 200:
        out.append("High impact featured: this list performed very strongly.")
    if ctr < 0.05:
        out.append("CTR is low. The cover image or title needs improvement.")
    if save_lift is not None and save_lift < 50:
        out.append(
            "Save lift was low. The category may not have been a good fit."
        )
    if score_lift is not None and score_lift > 150:
        out.append("Featuring drove significant trending growth.")
    return out


def evaluate_slot(record: FeaturedSlotRecord) -> FeaturedPerformance:
    ctr = calculate_ctr(record.impressions, record.clicks)
    save_lift = calculate_save_lift(record.saves_during, record.baseline_saves)
    score_lift = calculate_score_lift(record.baseline_score, record.peak_score)

    return FeaturedPerformance(
        slot_id=record.id,
        list_id=record.list_id,
        impressions=record.impressions,
        clicks=record.clicks,
        ctr=ctr,
        saves_during=record.saves_during,
        baseline_saves=record.baseline_saves,
        save_lift_percent=save_lift,
        baseline_score=record.baseline_score,
        peak_score=record.peak_score,
        score_lift_percent=score_lift,
        impact_label=get_impact_label(ctr, save_lift),
        recommendations=slot_recommendations(ctr, save_lift, score_lift),
    )


def _to_row(record: FeaturedSlotRecord) -> SlotPerformanceRow:
    performance = evaluate_slot(record)
    return SlotPerformanceRow(
        slot_id=record.id,
        list_id=record.list_id,
        list_title=record.list_title or UNTITLED,
        category_id=record.category_id,
        category_name=record.category_name,
        ctr=performance.ctr,
        save_lift_percent=performance.save_lift_percent,
        score_lift_percent=performance.score_lift_percent,
        impact_label=performance.impact_label,
    )


def weekly_recommendations(
    avg_ctr: float, avg_save_lift: Optional[float]
) -> list[str]:
    out = []
    if avg_ctr < 0.08:
        out.append(
            "Average CTR is low. Consider improving the hero image and title."
        )
    if avg_save_lift is not None and avg_save_lift < 50:
        out.append("Average save lift is low. Try featuring other categories.")
    if avg_save_lift is not None and avg_save_lift >= 150 and avg_ctr < 0.1:
        out.append(
            "The hero draws few clicks while the lists perform well. "
            "Strengthen the hero image or title."
        )
    if avg_ctr >= 0.12 and avg_save_lift is not None and avg_save_lift < 80:
        out.append(
            "High CTR but low save lift: the title or image is strong "
            "but the content did not meet expectations."
        )
    return out


def build_weekly_report(
    week_start: datetime,
    week_end: datetime,
    slots: Sequence[FeaturedSlotRecord],
) -> WeeklyReport:
    """주간 리포트 집계

    평균 Save Lift와 최고 성과는 Save Lift가 있는 슬롯만 대상으로 합니다.
    """
    rows = [_to_row(s) for s in slots]

    lifts = [r for r in rows if r.save_lift_percent is not None]
    avg_ctr = sum(r.ctr for r in rows) / len(rows) if rows else 0.0
    avg_save_lift = (
        sum(r.save_lift_percent for r in lifts) / len(lifts) if lifts else None
    )

    best = None
    for row in lifts:
        if best is None or row.save_lift_percent > best.save_lift_percent:
            best = row

    return WeeklyReport(
        week_start=week_start,
        week_end=week_end,
        total_slots=len(rows),
        avg_ctr=avg_ctr,
        avg_save_lift=avg_save_lift,
        best_performer=(
            BestPerformer(
                list_id=best.list_id,
                list_title=best.list_title,
                save_lift_percent=best.save_lift_percent,
            )
            if best
            else None
        ),
        slots=rows,
        recommendations=weekly_recommendations(avg_ctr, avg_save_lift),
    )


def _mean(values: Sequence[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def category_impact_score(avg_ctr: float, avg_save_lift: Optional[float]) -> float:
    return (avg_save_lift or 0.0) * CATEGORY_LIFT_WEIGHT + (
        avg_ctr * 100 * CATEGORY_CTR_WEIGHT
    )


def build_category_insights(
    range_days: int,
    start: datetime,
    end: datetime,
    slots: Sequence[FeaturedSlotRecord],
) -> CategoryInsights:
    """카테고리별 Featured 성과 순위

    카테고리가 없는 리스트는 하나의 "Uncategorized" 그룹으로 묶습니다.
    """
    names: dict[Optional[int], str] = {}
    ctrs: dict[Optional[int], list[float]] = defaultdict(list)
    save_lifts: dict[Optional[int], list[float]] = defaultdict(list)
    score_lifts: dict[Optional[int], list[float]] = defaultdict(list)

    for slot in slots:
        key = slot.category_id
        names.setdefault(key, slot.category_name or UNCATEGORIZED_NAME)
        performance = evaluate_slot(slot)
        ctrs[key].append(performance.ctr)
        if performance.save_lift_percent is not None:
            save_lifts[key].append(performance.save_lift_percent)
        if performance.score_lift_percent is not None:
            score_lifts[key].append(performance.score_lift_percent)

    unranked = []
    for key, name in names.items():
        avg_ctr = _mean(ctrs[key]) or 0.0
        avg_save_lift = _mean(save_lifts[key])
        unranked.append(
            (
                category_impact_score(avg_ctr, avg_save_lift),
                key,
                name,
                avg_ctr,
                avg_save_lift,
            )
        )
    unranked.sort(key=lambda row: -row[0])

    categories = [
        CategoryInsightRow(
            category_id=key,
            category_name=name,
            featured_count=len(ctrs[key]),
            avg_ctr=avg_ctr,
            avg_save_lift=avg_save_lift,
            avg_score_lift=_mean(score_lifts[key]),
            impact_score=impact,
            rank=i + 1,
        )
        for i, (impact, key, name, avg_ctr, avg_save_lift) in enumerate(unranked)
    ]

    return CategoryInsights(
        range_days=range_days,
        start=start,
        end=end,
        categories=categories,
        recommendations=category_recommendations(categories),
    )


def category_recommendations(
    categories: Sequence[CategoryInsightRow],
) -> list[str]:
    out = []
    if categories:
        top = categories[0]
        out.append(
            f"'{top.category_name}' had the highest impact score "
            f"({top.impact_score:.1f}) recently. "
            "Consider featuring more from this category."
        )
    if len(categories) > 1:
        last = categories[-1]
        if last.impact_score < WEAK_CATEGORY_IMPACT:
            out.append(
                f"'{last.category_name}' performed poorly when featured. "
                "Review list selection or timing for this category."
            )
    mismatch = next(
        (
            c
            for c in categories
            if c.avg_ctr >= 0.1
            and c.avg_save_lift is not None
            and c.avg_save_lift < 60
        ),
        None,
    )
    if mismatch is not None:
        out.append(
            f"'{mismatch.category_name}' has high CTR but low save lift; "
            "the title may be appealing while the content is weak."
        )
    return out
