"""Recommendation scorer tests."""

from decimal import Decimal

import pytest

from cartwise.data.store_quality import STORE_QUALITY, QualityProfile
from cartwise.data.stores import DELIVERY, INSTORE, PICKUP
from cartwise.services.recommendation.config import recommendation_config
from cartwise.services.recommendation.scorer import (
    StoreRecommender,
    generate_reason,
    score_and_recommend,
)
from cartwise.services.store_totals import compute_store_totals
from tests.helpers import FixedRandom, SequenceRandom, make_total


def _scores(rec):
    return {s.store_key: s for s in rec.scores}


class TestScoring:
    """Weighted score per store."""

    def test_item_a_pickup_scores(self, item_a_cart):
        totals = compute_store_totals(item_a_cart, PICKUP)
        rec = score_and_recommend(totals, PICKUP, rng=FixedRandom(0.0))
        scores = _scores(rec)

        heb = scores["heb"]
        assert heb.price_rank == 40
        assert heb.review == pytest.approx(22.5)
        assert heb.mode_bonus == 20
        assert heb.quality == pytest.approx(13.3)
        assert heb.total == pytest.approx(95.8)

        walmart = scores["walmart"]
        assert walmart.price_rank == 35
        assert walmart.review == pytest.approx(10.5)
        assert walmart.mode_bonus == 10
        assert walmart.quality == pytest.approx(8.7)
        assert walmart.total == pytest.approx(64.2)

    def test_item_a_pickup_recommends_heb(self, item_a_cart):
        totals = compute_store_totals(item_a_cart, PICKUP)
        rec = score_and_recommend(totals, PICKUP, rng=FixedRandom(0.0))
        assert rec.store.store_key == "heb"
        assert rec.is_cheapest is True
        assert rec.savings_vs_cheapest is None
        assert rec.reason.startswith("offers the best overall value")
        assert rec.confidence == 97
        assert rec.headline.startswith("We recommend H-E-B because it offers")

    def test_premium_store_beats_cheaper_one(self):
        totals = [make_total("walmart", "10.00", "Walmart"), make_total("heb", "12.50", "H-E-B")]
        rec = score_and_recommend(totals, PICKUP, rng=FixedRandom(0.0))
        assert rec.store.store_key == "heb"
        assert rec.is_cheapest is False
        assert rec.savings_vs_cheapest == "$2.50 more than cheapest"
        assert "exceptional freshness (4.8★)" in rec.reason

    def test_jitter_settles_a_near_tie(self):
        totals = [make_total("kroger", "20.00"), make_total("target", "20.40")]

        rec = score_and_recommend(totals, DELIVERY, rng=SequenceRandom([0.5, 0.0]))
        assert rec.store.store_key == "kroger"

        rec = score_and_recommend(totals, DELIVERY, rng=SequenceRandom([0.0, 0.5]))
        assert rec.store.store_key == "target"
        assert "outstanding item availability" in rec.reason

    def test_jitter_stays_under_weight(self):
        totals = [make_total("aldi", "5.00")]
        rec = score_and_recommend(totals, INSTORE, rng=FixedRandom(0.999999))
        assert 0 <= rec.scores[0].jitter < recommendation_config.weights.jitter

    def test_exact_tie_goes_to_cheaper_store(self):
        # 40 + 15 (target pickup) == 35 + 20 (heb pickup), identical quality
        flat = QualityProfile(review_score=2.5, freshness=2.5, availability=2.5, service=2.5)
        ledger = {"target": flat, "heb": flat}
        totals = [make_total("target", "10.00"), make_total("heb", "11.00")]

        rec = StoreRecommender(rng=FixedRandom(0.0), quality=ledger).recommend(totals, PICKUP)

        scores = _scores(rec)
        assert scores["target"].total == scores["heb"].total
        assert rec.store.store_key == "target"

    def test_empty_totals(self):
        assert score_and_recommend([], PICKUP, rng=FixedRandom(0.0)) is None

    def test_unknown_store_uses_default_quality(self):
        rec = score_and_recommend([make_total("corner", "3.00")], INSTORE, rng=FixedRandom(0.0))
        assert rec.quality.review_score == 4.0
        # 40 + 20 + 15 + 12
        assert rec.scores[0].total == pytest.approx(87.0)

    def test_winner_is_always_in_totals(self):
        totals = [make_total(k, str(10 + i)) for i, k in enumerate(STORE_QUALITY)]
        for seed in (0.0, 0.25, 0.5, 0.75, 0.99):
            rec = score_and_recommend(totals, DELIVERY, rng=FixedRandom(seed))
            assert rec.store in totals
            assert len(rec.scores) == len(totals)

    def test_to_dict(self, item_a_cart):
        totals = compute_store_totals(item_a_cart, PICKUP)
        data = score_and_recommend(totals, PICKUP, rng=FixedRandom(0.0)).to_dict()
        assert data["store"]["store_key"] == "heb"
        assert data["store"]["total"] == "5.44"
        assert data["metrics"]["freshness"] == 4.8
        assert data["scores"][0]["total"] == 95.8


class TestPriceRankBonus:
    """Rank points: 40, 35, 25, then 20 - 5 * rank floored at 0."""

    @pytest.mark.parametrize("rank,points", [(0, 40), (1, 35), (2, 25), (3, 5), (4, 0), (5, 0)])
    def test_for_rank(self, rank, points):
        assert recommendation_config.price_rank.for_rank(rank) == points


class TestModeBonuses:
    """Channel bonus per store."""

    @pytest.mark.parametrize("store,mode,bonus", [
        ("heb", PICKUP, 20),
        ("target", PICKUP, 15),
        ("aldi", PICKUP, 10),
        ("walmart", DELIVERY, 18),
        ("target", DELIVERY, 16),
        ("heb", DELIVERY, 12),
        ("walmart", INSTORE, 15),
        ("heb", INSTORE, 15),
    ])
    def test_for_store(self, store, mode, bonus):
        assert recommendation_config.mode_bonuses.for_store(store, mode) == bonus


class TestGenerateReason:
    """First matching branch wins."""

    def test_best_value(self):
        reason = generate_reason(STORE_QUALITY["heb"], is_cheapest=True)
        assert reason == (
            "offers the best overall value with excellent reviews (4.5★) and freshness (4.8★)"
        )

    def test_value_needs_review_strictly_above_four(self):
        profile = QualityProfile(review_score=4.0, freshness=4.8, availability=3.0, service=3.0)
        reason = generate_reason(profile, is_cheapest=True)
        assert reason.startswith("is highly recommended for its exceptional freshness (4.8★)")

    def test_availability(self):
        reason = generate_reason(STORE_QUALITY["target"], is_cheapest=False)
        assert reason.startswith("has outstanding item availability (4.5★)")

    def test_cheapest_with_high_availability(self):
        reason = generate_reason(STORE_QUALITY["walmart"], is_cheapest=True)
        assert reason.startswith("has outstanding item availability (4.6★)")

    def test_premium(self):
        profile = QualityProfile(review_score=4.4, freshness=4.0, availability=4.0, service=4.0)
        reason = generate_reason(profile, is_cheapest=False)
        assert reason == (
            "is worth the slight premium for its superior product quality "
            "and customer ratings (4.4★)"
        )

    def test_affordable(self):
        reason = generate_reason(STORE_QUALITY["aldi"], is_cheapest=True)
        assert reason == (
            "is the most affordable option, while maintaining a reasonable "
            "quality rating of 3.3★"
        )

    def test_balance(self):
        reason = generate_reason(STORE_QUALITY["sams"], is_cheapest=False)
        assert reason == (
            "provides an optimal balance of price and quality, with a solid "
            "3.2★ review score"
        )


class TestSavingsText:
    def test_savings_uses_rounded_totals(self):
        totals = [make_total("aldi", "9.99"), make_total("heb", "10.00")]
        rec = score_and_recommend(totals, PICKUP, rng=FixedRandom(0.0))
        # aldi: 40 + 16.5 + 10 + 8.4 = 74.9; heb: 35 + 22.5 + 20 + 13.3 = 90.8
        assert rec.store.store_key == "heb"
        assert rec.savings_vs_cheapest == "$0.01 more than cheapest"
        assert isinstance(rec.store.total - totals[0].total, Decimal)
