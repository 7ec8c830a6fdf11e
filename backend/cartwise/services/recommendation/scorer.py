"""Store scorer — weighted multi-factor store recommendation.

Scoring dimensions (see config):
  Price rank (40)      — position in the ascending-total ranking
  Review score (25)    — review_score / 5
  Mode bonus (20)      — channel-specific bonus per store
  Quality (15)         — mean of freshness, availability, service
  Jitter (< 5)         — random addend so near-ties don't always resolve the same way

The random source is injected: anything with a ``random() -> float`` method
(``random.Random`` in production, a seeded or stub source in tests).
"""

import logging
import random
from dataclasses import dataclass, field

from cartwise.data.store_quality import QualityProfile, quality_for
from cartwise.services.recommendation.config import recommendation_config
from cartwise.services.store_totals import StoreTotal

logger = logging.getLogger(__name__)

cfg = recommendation_config


# ---------- Data structures ----------


@dataclass
class ScoreBreakdown:
    """How a store was scored."""

    store_key: str
    price_rank: float = 0.0
    review: float = 0.0
    mode_bonus: float = 0.0
    quality: float = 0.0
    jitter: float = 0.0

    @property
    def total(self) -> float:
        return self.price_rank + self.review + self.mode_bonus + self.quality + self.jitter

    def to_dict(self) -> dict:
        return {
            "store_key": self.store_key,
            "price_rank": round(self.price_rank, 2),
            "review": round(self.review, 2),
            "mode_bonus": round(self.mode_bonus, 2),
            "quality": round(self.quality, 2),
            "jitter": round(self.jitter, 2),
            "total": round(self.total, 1),
        }


@dataclass
class Recommendation:
    """The winning store and why it won."""

    store: StoreTotal
    quality: QualityProfile
    reason: str
    confidence: int
    savings_vs_cheapest: str | None
    is_cheapest: bool
    scores: list[ScoreBreakdown] = field(default_factory=list)

    @property
    def headline(self) -> str:
        return f"We recommend {self.store.store} because it {self.reason}."

    def to_dict(self) -> dict:
        return {
            "store": self.store.to_dict(),
            "reason": self.reason,
            "headline": self.headline,
            "confidence": self.confidence,
            "metrics": self.quality.to_dict(),
            "savings": self.savings_vs_cheapest,
            "is_cheapest": self.is_cheapest,
            "scores": [s.to_dict() for s in self.scores],
        }


# ---------- Scorer ----------


class StoreRecommender:
    """Scores every ranked store and picks the winner."""

    def __init__(self, rng=None, quality: dict[str, QualityProfile] | None = None):
        self.rng = rng if rng is not None else random.Random()
        self.quality = quality

    def recommend(self, totals: list[StoreTotal], mode: str) -> Recommendation | None:
        """Recommend a store from totals sorted ascending by total.

        Returns None for an empty list. Ties go to the earlier (cheaper) store.
        """
        if not totals:
            return None

        scores = [self._score(t, rank, mode) for rank, t in enumerate(totals)]

        best_index = 0
        for i, s in enumerate(scores):
            if s.total > scores[best_index].total:
                best_index = i

        winner = totals[best_index]
        cheapest = totals[0]
        profile = quality_for(winner.store_key, self.quality)
        is_cheapest = winner.store_key == cheapest.store_key

        savings = None
        if not is_cheapest:
            savings = f"${winner.total - cheapest.total:.2f} more than cheapest"

        logger.info(
            f"Recommended {winner.store_key} ({mode}) score={scores[best_index].total:.1f}, "
            f"cheapest={cheapest.store_key}"
        )

        return Recommendation(
            store=winner,
            quality=profile,
            reason=generate_reason(profile, is_cheapest),
            confidence=cfg.confidence,
            savings_vs_cheapest=savings,
            is_cheapest=is_cheapest,
            scores=scores,
        )

    def _score(self, total: StoreTotal, rank: int, mode: str) -> ScoreBreakdown:
        w = cfg.weights
        profile = quality_for(total.store_key, self.quality)
        return ScoreBreakdown(
            store_key=total.store_key,
            price_rank=cfg.price_rank.for_rank(rank),
            review=profile.review_score / w.rating_scale * w.review,
            mode_bonus=cfg.mode_bonuses.for_store(total.store_key, mode),
            quality=profile.composite / w.rating_scale * w.quality,
            jitter=self.rng.random() * w.jitter,
        )


def generate_reason(profile: QualityProfile, is_cheapest: bool) -> str:
    """Pick the reason sentence; first matching branch wins."""
    t = cfg.reasons

    if (
        is_cheapest
        and profile.review_score > t.value_review_above
        and profile.freshness > t.value_freshness_above
    ):
        return (
            f"offers the best overall value with excellent reviews "
            f"({profile.review_score}★) and freshness ({profile.freshness}★)"
        )
    if profile.freshness >= t.exceptional_freshness:
        return (
            f"is highly recommended for its exceptional freshness "
            f"({profile.freshness}★), perfect for produce lovers"
        )
    if profile.availability >= t.exceptional_availability:
        return (
            f"has outstanding item availability ({profile.availability}★), "
            f"so you're likely to find everything on your list"
        )
    if profile.review_score >= t.premium_review and not is_cheapest:
        return (
            f"is worth the slight premium for its superior product quality "
            f"and customer ratings ({profile.review_score}★)"
        )
    if is_cheapest:
        return (
            f"is the most affordable option, while maintaining a reasonable "
            f"quality rating of {profile.review_score}★"
        )
    return (
        f"provides an optimal balance of price and quality, with a solid "
        f"{profile.review_score}★ review score"
    )


def score_and_recommend(
    totals: list[StoreTotal],
    mode: str,
    quality: dict[str, QualityProfile] | None = None,
    rng=None,
) -> Recommendation | None:
    return StoreRecommender(rng=rng, quality=quality).recommend(totals, mode)
