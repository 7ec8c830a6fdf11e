"""Recommendation engine configuration — single source for all weights and thresholds."""

from dataclasses import dataclass, field

from cartwise.data.stores import DELIVERY, PICKUP


@dataclass(frozen=True)
class PriceRankBonus:
    """Points by position in the ascending-total ranking (max 40)."""
    first: float = 40.0
    second: float = 35.0
    third: float = 25.0
    tail_base: float = 20.0      # rank >= 3: max(0, tail_base - rank * tail_step)
    tail_step: float = 5.0

    def for_rank(self, rank: int) -> float:
        if rank == 0:
            return self.first
        if rank == 1:
            return self.second
        if rank == 2:
            return self.third
        return max(0.0, self.tail_base - rank * self.tail_step)


@dataclass(frozen=True)
class ScoreWeights:
    """Maximum points per scoring factor."""
    review: float = 25.0
    quality: float = 15.0
    jitter: float = 5.0          # random addend in [0, jitter)
    rating_scale: float = 5.0    # ratings are 0-5


@dataclass(frozen=True)
class ModeBonuses:
    """Per-channel bonus (max 20) for stores known to do that channel well."""
    pickup: dict = field(default_factory=lambda: {"heb": 20.0, "target": 15.0})
    pickup_default: float = 10.0
    delivery: dict = field(default_factory=lambda: {"walmart": 18.0, "target": 16.0})
    delivery_default: float = 12.0
    instore_default: float = 15.0

    def for_store(self, store_key: str, mode: str) -> float:
        if mode == PICKUP:
            return self.pickup.get(store_key, self.pickup_default)
        if mode == DELIVERY:
            return self.delivery.get(store_key, self.delivery_default)
        return self.instore_default


@dataclass(frozen=True)
class ReasonThresholds:
    """Cut-offs for the reason decision tree."""
    value_review_above: float = 4.0
    value_freshness_above: float = 4.0
    exceptional_freshness: float = 4.5
    exceptional_availability: float = 4.5
    premium_review: float = 4.4


@dataclass(frozen=True)
class PromptLimits:
    """Bounds on assembled chat prompts."""
    max_user_message_chars: int = 500
    max_stores: int = 6
    max_cart_items: int = 25
    response_word_limit: int = 150


@dataclass(frozen=True)
class LLMParams:
    """Parameters for the chat LLM call."""
    max_tokens: int = 400
    temperature: float = 0.7


@dataclass(frozen=True)
class RecommendationConfig:
    """Top-level config aggregating all sub-configs."""
    price_rank: PriceRankBonus = field(default_factory=PriceRankBonus)
    weights: ScoreWeights = field(default_factory=ScoreWeights)
    mode_bonuses: ModeBonuses = field(default_factory=ModeBonuses)
    reasons: ReasonThresholds = field(default_factory=ReasonThresholds)
    prompts: PromptLimits = field(default_factory=PromptLimits)
    llm: LLMParams = field(default_factory=LLMParams)
    confidence: int = 97         # shown as "97% match"; fixed, not derived


# Singleton, import this everywhere
recommendation_config = RecommendationConfig()
