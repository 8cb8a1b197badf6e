"""Featured 성과 분석 단위 테스트"""

from datetime import datetime, timedelta

import pytest

from app.core.utils.datetime import UTC
from app.domains.featured.analytics import (
    build_category_insights,
    build_weekly_report,
    calculate_ctr,
    calculate_save_lift,
    calculate_score_lift,
    evaluate_slot,
    get_impact_label,
)
from app.domains.featured.types import FeaturedSlotRecord, ImpactLabel

WEEK_START = datetime(2025, 3, 3, tzinfo=UTC)


def _slot(slot_id, **kwargs):
    kwargs.setdefault("start_at", WEEK_START + timedelta(days=slot_id))
    return FeaturedSlotRecord(id=slot_id, list_id=slot_id * 10, **kwargs)


@pytest.fixture
def week_slots():
    """강한 슬롯, 약한 슬롯, 데이터 없는 슬롯"""
    return [
        _slot(
            1,
            impressions=100,
            clicks=20,
            baseline_saves=10,
            saves_during=25,
            baseline_score=100.0,
            peak_score=300.0,
            list_title="Strong",
            category_id=1,
            category_name="Books",
        ),
        _slot(
            2,
            impressions=100,
            clicks=2,
            baseline_saves=10,
            saves_during=3,
            list_title="Weak",
            category_id=2,
            category_name="Music",
        ),
        _slot(3),
    ]


class TestSlotMetrics:
    """슬롯 지표 계산 테스트"""

    def test_ctr(self):
        assert calculate_ctr(200, 30) == pytest.approx(0.15)
        assert calculate_ctr(0, 5) == 0.0

    def test_save_lift(self):
        assert calculate_save_lift(15, 10) == pytest.approx(150.0)
        assert calculate_save_lift(15, None) is None
        assert calculate_save_lift(15, 0) is None

    def test_score_lift(self):
        assert calculate_score_lift(100.0, 250.0) == pytest.approx(150.0)
        assert calculate_score_lift(None, 250.0) is None
        assert calculate_score_lift(0.0, 250.0) is None
        assert calculate_score_lift(100.0, None) is None

    @pytest.mark.parametrize(
        "ctr,save_lift,label",
        [
            (0.20, 200.0, ImpactLabel.HIGH),
            (0.15, 150.0, ImpactLabel.HIGH),
            (0.16, 120.0, ImpactLabel.MODERATE),
            (0.20, None, ImpactLabel.MODERATE),
            (0.05, 90.0, ImpactLabel.MODERATE),
            (0.05, 50.0, ImpactLabel.LOW),
            (0.0, None, ImpactLabel.LOW),
        ],
    )
    def test_impact_label(self, ctr, save_lift, label):
        assert get_impact_label(ctr, save_lift) == label


class TestEvaluateSlot:
    """슬롯 평가 테스트"""

    def test_thousand_impressions_example(self):
        """노출 1000, 클릭 120, baseline 10 → 기간 중 25"""
        slot = _slot(
            4, impressions=1000, clicks=120, baseline_saves=10, saves_during=25
        )

        performance = evaluate_slot(slot)

        assert performance.ctr == pytest.approx(0.12)
        assert performance.save_lift_percent == pytest.approx(250.0)
        assert performance.score_lift_percent is None
        # CTR 0.15 미만이므로 High가 아님
        assert performance.impact_label == ImpactLabel.MODERATE

    def test_strong_slot(self, week_slots):
        performance = evaluate_slot(week_slots[0])

        assert performance.ctr == pytest.approx(0.2)
        assert performance.save_lift_percent == pytest.approx(250.0)
        assert performance.score_lift_percent == pytest.approx(200.0)
        assert performance.impact_label == ImpactLabel.HIGH
        assert performance.recommendations == [
            "High impact featured: this list performed very strongly.",
            "Featuring drove significant trending growth.",
        ]

    def test_weak_slot(self, week_slots):
        performance = evaluate_slot(week_slots[1])

        assert performance.impact_label == ImpactLabel.LOW
        assert performance.recommendations == [
            "CTR is low. The cover image or title needs improvement.",
            "Save lift was low. The category may not have been a good fit.",
        ]

    def test_slot_without_data(self, week_slots):
        performance = evaluate_slot(week_slots[2])

        assert performance.ctr == 0.0
        assert performance.save_lift_percent is None
        assert performance.score_lift_percent is None


class TestWeeklyReport:
    """주간 리포트 테스트"""

    def test_aggregates(self, week_slots):
        report = build_weekly_report(
            WEEK_START, WEEK_START + timedelta(days=7), week_slots
        )

        assert report.total_slots == 3
        assert report.avg_ctr == pytest.approx(0.22 / 3)
        # Save Lift가 있는 슬롯만 평균
        assert report.avg_save_lift == pytest.approx(140.0)
        assert report.best_performer.list_id == 10
        assert report.best_performer.list_title == "Strong"
        assert report.slots[2].list_title == "-"
        assert report.recommendations == [
            "Average CTR is low. Consider improving the hero image and title."
        ]

    def test_empty_week(self):
        report = build_weekly_report(WEEK_START, WEEK_START + timedelta(days=7), [])

        assert report.total_slots == 0
        assert report.avg_ctr == 0.0
        assert report.avg_save_lift is None
        assert report.best_performer is None

    def test_best_performer_first_wins_on_tie(self):
        slots = [
            _slot(1, baseline_saves=10, saves_during=10),
            _slot(2, baseline_saves=5, saves_during=5),
        ]

        report = build_weekly_report(WEEK_START, WEEK_START, slots)

        assert report.best_performer.list_id == 10

    def test_high_ctr_low_lift_message(self):
        slots = [_slot(1, impressions=100, clicks=15, baseline_saves=10, saves_during=7)]

        report = build_weekly_report(WEEK_START, WEEK_START, slots)

        assert any(r.startswith("High CTR but low save lift") for r in report.recommendations)


class TestCategoryInsights:
    """카테고리 인사이트 테스트"""

    def test_ranking_and_recommendations(self, week_slots):
        end = WEEK_START + timedelta(days=30)

        insights = build_category_insights(30, WEEK_START, end, week_slots)

        names = [c.category_name for c in insights.categories]
        assert names == ["Books", "Music", "Uncategorized"]
        assert [c.rank for c in insights.categories] == [1, 2, 3]
        # 250·0.6 + 0.2·100·0.4
        assert insights.categories[0].impact_score == pytest.approx(158.0)
        assert insights.categories[1].impact_score == pytest.approx(18.8)
        assert insights.categories[2].category_id is None
        assert insights.recommendations[0] == (
            "'Books' had the highest impact score (158.0) recently. "
            "Consider featuring more from this category."
        )
        assert insights.recommendations[1].startswith(
            "'Uncategorized' performed poorly"
        )
        assert len(insights.recommendations) == 2

    def test_groups_slots_by_category(self):
        slots = [
            _slot(1, category_id=1, category_name="Books", impressions=10, clicks=1),
            _slot(2, category_id=1, category_name="Books", impressions=10, clicks=3),
        ]

        insights = build_category_insights(30, WEEK_START, WEEK_START, slots)

        (books,) = insights.categories
        assert books.featured_count == 2
        assert books.avg_ctr == pytest.approx(0.2)
        assert books.avg_save_lift is None

    def test_mismatch_message(self):
        slots = [
            _slot(
                1,
                category_id=1,
                category_name="Books",
                impressions=10,
                clicks=2,
                baseline_saves=10,
                saves_during=5,
            )
        ]

        insights = build_category_insights(30, WEEK_START, WEEK_START, slots)

        assert insights.recommendations[-1].startswith(
            "'Books' has high CTR but low save lift"
        )

    def test_no_slots(self):
        insights = build_category_insights(30, WEEK_START, WEEK_START, [])

        assert insights.categories == []
        assert insights.recommendations == []
