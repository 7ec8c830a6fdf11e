"""Chat assistant tests: rate limit gate, variants, fallbacks."""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from cartwise.services.llm_client import LLMError
from cartwise.services.rate_limiter import SlidingWindowRateLimiter
from cartwise.services.recommendation.assistant import (
    DIETARY,
    DIETARY_FALLBACK,
    EMPTY_CART_MESSAGE,
    SHOPPING,
    SHOPPING_FALLBACK,
    ChatAssistant,
    rate_limit_message,
)
from cartwise.services.recommendation.context_builder import DietaryContext
from cartwise.services.session_service import ShoppingSession
from tests.helpers import FixedRandom


def _session(clock=None) -> ShoppingSession:
    limiter = SlidingWindowRateLimiter(max_requests=4, window_seconds=60, clock=clock or (lambda: 0.0))
    session = ShoppingSession(id="chat", rng=FixedRandom(0.0), limiter=limiter)
    session.add_item(
        "a", "Item A",
        prices={"walmart": Decimal("3.00"), "heb": Decimal("2.50")},
        category="Produce",
        quantity=2,
    )
    return session


def _assistant(text="Because it is fresh.", error=None):
    llm = AsyncMock()
    if error is not None:
        llm.complete.side_effect = error
    else:
        llm.complete.return_value = text
    return ChatAssistant(llm=llm), llm


class TestReply:
    """One reply per message."""

    def test_shopping_reply(self):
        assistant, llm = _assistant()
        reply = asyncio.run(assistant.reply(_session(), "Why H-E-B?", SHOPPING))
        assert reply.status == "ok"
        assert reply.text == "Because it is fresh."
        prompt = llm.complete.call_args.kwargs["user"]
        assert "- Recommended Store: H-E-B" in prompt
        assert llm.complete.call_args.kwargs["max_tokens"] == 400

    def test_dietary_reply_has_no_store_data(self):
        assistant, llm = _assistant("Try more greens.")
        reply = asyncio.run(assistant.reply(_session(), "Healthy?", DIETARY))
        assert reply.status == "ok"
        prompt = llm.complete.call_args.kwargs["user"]
        assert "H-E-B" not in prompt
        assert "$" not in prompt
        assert "- Health score: 100/100 (Excellent)" in prompt

    def test_llm_failure_falls_back(self):
        assistant, _ = _assistant(error=LLMError("All LLM providers failed: OpenAI: boom"))
        shopping = asyncio.run(assistant.reply(_session(), "hi", SHOPPING))
        dietary = asyncio.run(assistant.reply(_session(), "hi", DIETARY))
        assert (shopping.status, shopping.text) == ("fallback", SHOPPING_FALLBACK)
        assert (dietary.status, dietary.text) == ("fallback", DIETARY_FALLBACK)
        assert "boom" not in shopping.text

    def test_empty_cart_shopping_reply(self):
        assistant, llm = _assistant()
        session = _session()
        session.clear()
        reply = asyncio.run(assistant.reply(session, "hi", SHOPPING))
        assert reply.status == "fallback"
        assert reply.text == EMPTY_CART_MESSAGE
        llm.complete.assert_not_called()

    def test_empty_cart_does_not_use_rate_limit_slots(self):
        assistant, llm = _assistant()
        session = _session()
        session.clear()
        replies = [asyncio.run(assistant.reply(session, "hi", SHOPPING)) for _ in range(6)]
        assert {r.status for r in replies} == {"fallback"}
        assert session.limiter.recent_count() == 0
        llm.complete.assert_not_called()

    def test_cart_no_store_carries_gets_empty_cart_reply(self):
        assistant, llm = _assistant()
        session = _session()
        session.clear()
        session.add_item("x", "Mystery item", prices={})
        reply = asyncio.run(assistant.reply(session, "hi", SHOPPING))
        assert reply.text == EMPTY_CART_MESSAGE
        assert session.limiter.recent_count() == 0

    def test_unknown_variant(self):
        assistant, _ = _assistant()
        with pytest.raises(ValueError):
            asyncio.run(assistant.reply(_session(), "hi", "legal"))


class TestRateLimit:
    """Four messages per minute, then a countdown."""

    def test_fifth_message_is_rejected_without_llm_call(self):
        now = [0.0]
        session = _session(clock=lambda: now[0])
        assistant, llm = _assistant()

        async def scenario():
            replies = []
            for t in (0, 10, 20, 30, 40):
                now[0] = t
                replies.append(await assistant.reply(session, "hi", SHOPPING))
            running = session.ticker is not None and session.ticker.running
            assert session.countdown == 20
            session.close()
            return replies, running

        replies, ticker_started = asyncio.run(scenario())
        assert [r.status for r in replies] == ["ok"] * 4 + ["rate_limited"]
        assert replies[-1].retry_after_seconds == 20
        assert replies[-1].text == rate_limit_message(20)
        assert llm.complete.call_count == 4
        assert ticker_started
        assert session.countdown == 0  # closed

    def test_message_wording(self):
        assert rate_limit_message(1) == (
            "Rate limit reached. Please wait 1 second before sending another message."
        )
        assert "wait 20 seconds" in rate_limit_message(20)


class TestGenerate:
    def test_raises_llm_error(self):
        assistant, _ = _assistant(error=LLMError("No LLM provider configured"))
        with pytest.raises(LLMError):
            asyncio.run(assistant.generate("hi", DietaryContext.from_cart([])))
