"""Static per-store quality ratings with the rationale behind each score.

Scores are on a 0-5 scale. Used by the recommendation scorer (review score,
freshness, availability, service) and quoted verbatim in the shopping chat
context.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class QualityProfile:
    review_score: float
    freshness: float
    availability: float
    service: float
    review_reasoning: str = ""
    freshness_reasoning: str = ""
    availability_reasoning: str = ""
    service_reasoning: str = ""

    @property
    def composite(self) -> float:
        """Mean of freshness, availability and service."""
        return (self.freshness + self.availability + self.service) / 3

    def to_dict(self) -> dict:
        return {
            "review_score": self.review_score,
            "freshness": self.freshness,
            "availability": self.availability,
            "service": self.service,
        }


STORE_QUALITY: dict[str, QualityProfile] = {
    "heb": QualityProfile(
        review_score=4.5,
        review_reasoning="Excellent private label products and high-quality meat department.",
        freshness=4.8,
        freshness_reasoning="Signature strength; consistently high-quality produce and meat.",
        availability=4.2,
        availability_reasoning="Accurate in-app stock reporting, but some out-of-stocks for online orders.",
        service=4.3,
        service_reasoning="Friendly in-store service, but digital/delivery support can be frustrating.",
    ),
    "kroger": QualityProfile(
        review_score=4.1,
        review_reasoning="Satisfaction guarantee on its extensive private label brands.",
        freshness=4.0,
        freshness_reasoning="Strong commitment to quality with its 'Freshness Guarantee'.",
        availability=4.0,
        availability_reasoning="Consistent and reliable stock levels for a full-service grocer.",
        service=4.2,
        service_reasoning="Robust customer service with 'super friendly' and helpful staff.",
    ),
    "target": QualityProfile(
        review_score=4.4,
        review_reasoning="Products perceived as very high quality.",
        freshness=4.1,
        freshness_reasoning="Strong brand perception for freshness, despite isolated incidents.",
        availability=4.5,
        availability_reasoning="Excels with powerful, user-friendly tools to check real-time stock.",
        service=2.8,
        service_reasoning="Significant service gap; frustrating online order fulfillment and unhelpful representatives.",
    ),
    "sams": QualityProfile(
        review_score=3.2,
        review_reasoning="Good value on Member's Mark brand, but inconsistent quality.",
        freshness=2.5,
        freshness_reasoning="Frequent complaints about spoiled or moldy produce.",
        availability=3.0,
        availability_reasoning="Limited selection due to bulk-item warehouse model.",
        service=1.8,
        service_reasoning="Major customer frustration; lack of staff, over-reliance on self-checkout.",
    ),
    "walmart": QualityProfile(
        review_score=2.1,
        review_reasoning="Low quality score, particularly for groceries.",
        freshness=1.9,
        freshness_reasoning="Significant weakness; consistent issues with moldy or damaged produce.",
        availability=4.6,
        availability_reasoning="Key strength; vast product selection and high availability.",
        service=2.2,
        service_reasoning="Poor online order picking and unhelpful support.",
    ),
    "aldi": QualityProfile(
        review_score=3.3,
        review_reasoning="Value-driven, but some notable complaints about items like packaged chicken.",
        freshness=3.1,
        freshness_reasoning="Inconsistent; some customers find it excellent, others are disappointed.",
        availability=2.4,
        availability_reasoning="Frequent out-of-stock items are a widely reported issue.",
        service=2.9,
        service_reasoning="High-efficiency model leads to long checkout lines and lack of floor staff.",
    ),
}

# Neutral profile for stores without review data
DEFAULT_QUALITY = QualityProfile(review_score=4.0, freshness=4.0, availability=4.0, service=4.0)


def quality_for(store_key: str, ledger: dict[str, QualityProfile] | None = None) -> QualityProfile:
    ledger = STORE_QUALITY if ledger is None else ledger
    return ledger.get(store_key, DEFAULT_QUALITY)
