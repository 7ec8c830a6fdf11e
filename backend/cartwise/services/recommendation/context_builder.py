"""Chat context builder — assembles the prompt sent to the text-generation service.

Two variants, each with its own context type:

  ShoppingContext  explains the store recommendation using the full per-store
                   price and quality comparison
  DietaryContext   nutrition help over the cart's contents; carries no store,
                   price or recommendation data at all

The dietary type only holds item names, categories and quantities, so store
context cannot leak into a dietary prompt.
"""

import logging
from dataclasses import dataclass, field

from cartwise.data.store_quality import QualityProfile, quality_for
from cartwise.data.stores import DELIVERY, INSTORE, PICKUP
from cartwise.services.health_score import health_label, health_score, produce_count
from cartwise.services.recommendation.config import recommendation_config
from cartwise.services.recommendation.prompts import load_prompt
from cartwise.services.recommendation.scorer import Recommendation
from cartwise.services.store_totals import StoreTotal

logger = logging.getLogger(__name__)

cfg = recommendation_config

# Load guides once at module level
_SHOPPING_GUIDE = load_prompt("shopping_assistant_guide.md")
_DIETARY_GUIDE = load_prompt("dietary_assistant_guide.md")

MODE_LABELS = {
    PICKUP: "Pickup",
    DELIVERY: "Delivery",
    INSTORE: "In-store",
}


# ---------- Context variants ----------


@dataclass(frozen=True)
class ShoppingContext:
    """Everything the shopping assistant may cite."""
    recommendation: Recommendation
    totals: tuple[StoreTotal, ...]
    mode: str
    quality: dict[str, QualityProfile] | None = None


@dataclass(frozen=True)
class DietaryItem:
    name: str
    category: str
    quantity: int


@dataclass(frozen=True)
class DietaryContext:
    """Cart make-up for the nutrition assistant. No prices, no stores."""
    items: tuple[DietaryItem, ...] = field(default_factory=tuple)
    health_score: int = 0
    produce_items: int = 0

    @classmethod
    def from_cart(cls, lines) -> "DietaryContext":
        lines = tuple(lines or ())
        return cls(
            items=tuple(
                DietaryItem(name=line.name, category=line.category, quantity=line.quantity)
                for line in lines
            ),
            health_score=health_score(lines),
            produce_items=produce_count(lines),
        )


# ---------- Builder ----------


def build_prompt(user_message: str, context: ShoppingContext | DietaryContext) -> str:
    """Assemble the full prompt for one chat turn."""
    message = _truncate(user_message, cfg.prompts.max_user_message_chars)

    if isinstance(context, ShoppingContext):
        return _build_shopping_prompt(message, context)
    if isinstance(context, DietaryContext):
        return _build_dietary_prompt(message, context)
    raise TypeError(f"Unsupported chat context: {type(context).__name__}")


def _build_shopping_prompt(message: str, context: ShoppingContext) -> str:
    rec = context.recommendation
    recommended = rec.store.store
    guide = _SHOPPING_GUIDE.format(
        word_limit=cfg.prompts.response_word_limit,
        recommended_store=recommended,
    ).strip()

    comparison = "\n".join(
        _store_comparison_line(t, rec.store.store_key, context.quality)
        for t in context.totals[: cfg.prompts.max_stores]
    )

    return f"""{guide}

CONTEXT:
- Shopping Type: {MODE_LABELS.get(context.mode, context.mode)}
- Recommended Store: {recommended}
- Why it was recommended: {recommended} {rec.reason}

FULL STORE COMPARISON (PRICE & REVIEWS):
{comparison}

User Question: {message}"""


def _store_comparison_line(
    total: StoreTotal,
    recommended_key: str,
    ledger: dict[str, QualityProfile] | None,
) -> str:
    marker = " (RECOMMENDED)" if total.store_key == recommended_key else ""
    head = f"- {total.store}: ${total.total:.2f}{marker}"

    if ledger is not None and total.store_key not in ledger:
        return head

    q = quality_for(total.store_key, ledger)
    if not q.review_reasoning:
        return head
    return (
        f"{head}\n"
        f"  - Reviews: {q.review_score}★ - {q.review_reasoning}\n"
        f"  - Freshness: {q.freshness}★ - {q.freshness_reasoning}\n"
        f"  - Availability: {q.availability}★ - {q.availability_reasoning}\n"
        f"  - Service: {q.service}★ - {q.service_reasoning}"
    )


def _build_dietary_prompt(message: str, context: DietaryContext) -> str:
    guide = _DIETARY_GUIDE.format(word_limit=cfg.prompts.response_word_limit).strip()

    items = context.items[: cfg.prompts.max_cart_items]
    if items:
        cart_lines = "\n".join(
            f"- {item.name} x{item.quantity} ({item.category or 'uncategorized'})"
            for item in items
        )
        hidden = len(context.items) - len(items)
        if hidden > 0:
            cart_lines += f"\n- ...and {hidden} more items"
    else:
        cart_lines = "- (cart is empty)"

    total_items = sum(item.quantity for item in context.items)

    return f"""{guide}

CART CONTENTS:
{cart_lines}

CART NUTRITION SNAPSHOT:
- Produce items: {context.produce_items} of {total_items}
- Health score: {context.health_score}/100 ({health_label(context.health_score)})

User: {message}"""


def _truncate(text, max_len: int) -> str:
    """Truncate text to max_len, appending '...' if truncated."""
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)
    text = text.strip()
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."
