"""Chat assistant — one rate-limited LLM call per user message.

Flow per message:
  1. Session rate limiter (rejection is a normal reply with a countdown)
  2. Build the variant's context and prompt
  3. One LLM call
  4. On any LLMError, a static fallback message; raw provider errors are
     logged and never shown to the user
"""

import logging
from dataclasses import dataclass

from cartwise.services.llm_client import LLMError, llm_client
from cartwise.services.recommendation.config import recommendation_config
from cartwise.services.recommendation.context_builder import (
    DietaryContext,
    ShoppingContext,
    build_prompt,
)

logger = logging.getLogger(__name__)

cfg = recommendation_config

SHOPPING = "shopping"
DIETARY = "dietary"
CHAT_VARIANTS = (SHOPPING, DIETARY)

SYSTEM_PROMPT = (
    "You are a concise, friendly assistant inside a grocery app. "
    "Follow the instructions in the user message and use only the data it provides."
)

SHOPPING_FALLBACK = (
    "Sorry, I can't answer that right now. The recommendation is based on each "
    "store's total price, customer reviews, freshness, availability and service "
    "for your shopping type. Please try again in a moment."
)

DIETARY_FALLBACK = (
    "I'm here to help with health recommendations! You can ask me about dietary "
    "alternatives, allergy-friendly products, or nutrition tips based on your cart items."
)

EMPTY_CART_MESSAGE = "Add some items to your cart and I'll explain which store fits it best."

FALLBACKS = {SHOPPING: SHOPPING_FALLBACK, DIETARY: DIETARY_FALLBACK}


@dataclass
class ChatReply:
    status: str                 # "ok" | "fallback" | "rate_limited"
    text: str
    variant: str
    retry_after_seconds: int = 0

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "text": self.text,
            "variant": self.variant,
            "retry_after_seconds": self.retry_after_seconds,
        }


def rate_limit_message(seconds: int) -> str:
    unit = "second" if seconds == 1 else "seconds"
    return f"Rate limit reached. Please wait {seconds} {unit} before sending another message."


class ChatAssistant:
    """Answers chat messages about a session's cart."""

    def __init__(self, llm=None):
        self.llm = llm if llm is not None else llm_client

    async def generate(self, user_message: str, context: ShoppingContext | DietaryContext) -> str:
        """Build the prompt and call the LLM. Raises LLMError on failure."""
        prompt = build_prompt(user_message, context)
        return await self.llm.complete(
            system=SYSTEM_PROMPT,
            user=prompt,
            max_tokens=cfg.llm.max_tokens,
            temperature=cfg.llm.temperature,
        )

    async def reply(self, session, user_message: str, variant: str = SHOPPING) -> ChatReply:
        if variant not in CHAT_VARIANTS:
            raise ValueError(f"Unknown chat variant: {variant}")

        # Nothing to compare: canned reply, no rate-limit slot used
        if variant == SHOPPING and not session.store_totals():
            return ChatReply(status="fallback", text=EMPTY_CART_MESSAGE, variant=variant)

        if not session.limiter.allow():
            wait = session.limiter.seconds_until_reset()
            session.start_countdown()
            logger.info(f"Session {session.id} chat rate limited for {wait}s")
            return ChatReply(
                status="rate_limited",
                text=rate_limit_message(wait),
                variant=variant,
                retry_after_seconds=wait,
            )

        context = self._build_context(session, variant)

        try:
            text = await self.generate(user_message, context)
        except LLMError as e:
            logger.warning(f"Chat LLM failed for session {session.id} ({variant}), using fallback: {e}")
            return ChatReply(status="fallback", text=FALLBACKS[variant], variant=variant)

        return ChatReply(status="ok", text=text, variant=variant)

    @staticmethod
    def _build_context(session, variant: str) -> ShoppingContext | DietaryContext:
        if variant == DIETARY:
            return DietaryContext.from_cart(session.snapshot())

        return ShoppingContext(
            recommendation=session.recommendation(),
            totals=tuple(session.store_totals()),
            mode=session.mode,
        )


# Singleton
chat_assistant = ChatAssistant()
