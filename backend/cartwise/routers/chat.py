"""Rate-limited assistant per session, plus the stateless relay."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from cartwise.data.store_quality import quality_for
from cartwise.data.stores import STORE_NAMES
from cartwise.dependencies import get_session
from cartwise.schemas.chat import ChatRequest, RelayRequest, RelayStore
from cartwise.services.llm_client import LLMError
from cartwise.services.recommendation.assistant import chat_assistant, rate_limit_message
from cartwise.services.recommendation.config import recommendation_config
from cartwise.services.recommendation.context_builder import ShoppingContext
from cartwise.services.recommendation.scorer import Recommendation
from cartwise.services.session_service import ShoppingSession
from cartwise.services.store_totals import StoreTotal, to_cents

logger = logging.getLogger(__name__)

router = APIRouter()

_KEYS_BY_NAME = {name: key for key, name in STORE_NAMES.items()}

RELAY_ERROR = "The assistant is unavailable right now. Please try again shortly."


@router.post("/sessions/{session_id}/chat")
async def chat(req: ChatRequest, session: ShoppingSession = Depends(get_session)):
    """Answer a chat message. A rate-limited call is a normal reply, not an error."""
    reply = await chat_assistant.reply(session, req.message, req.variant)
    return reply.to_dict()


@router.get("/sessions/{session_id}/chat/status")
async def chat_status(session: ShoppingSession = Depends(get_session)):
    """Countdown state for the chat input, as last ticked by the session countdown."""
    wait = session.countdown
    return {
        "rate_limited": wait > 0,
        "retry_after_seconds": wait,
        "message": rate_limit_message(wait) if wait > 0 else None,
        "recent_messages": session.limiter.recent_count(),
    }


@router.post("/chat-with-ai")
async def chat_with_ai(req: RelayRequest):
    """Stateless relay for the shopping assistant.

    Shopping-only: the request must name the recommended store. Dietary chat
    goes through the session endpoint.
    """
    totals = tuple(_to_store_total(s) for s in req.store_totals)
    winner = _to_store_total(req.recommendation.store)
    is_cheapest = bool(totals) and totals[0].store_key == winner.store_key

    recommendation = Recommendation(
        store=winner,
        quality=quality_for(winner.store_key),
        reason=req.recommendation.reason,
        confidence=recommendation_config.confidence,
        savings_vs_cheapest=None,
        is_cheapest=is_cheapest,
    )
    context = ShoppingContext(recommendation=recommendation, totals=totals, mode=req.shopping_type)

    try:
        text = await chat_assistant.generate(req.user_message, context)
    except LLMError as e:
        logger.error(f"Relay LLM call failed: {e}")
        return JSONResponse(status_code=502, content={"error": RELAY_ERROR})

    return {"response": text}


def _to_store_total(s: RelayStore) -> StoreTotal:
    key = s.store_key or _KEYS_BY_NAME.get(s.store, s.store.lower())
    return StoreTotal(
        store_key=key,
        store=s.store,
        subtotal=to_cents(s.subtotal),
        taxes_and_fees=to_cents(s.taxes_and_fees),
        total=to_cents(s.total),
    )
