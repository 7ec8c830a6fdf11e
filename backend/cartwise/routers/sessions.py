"""Shopping session routes: cart, fulfillment mode, store totals, recommendation."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from cartwise.dependencies import get_session
from cartwise.schemas.cart import (
    AddItemRequest,
    CreateSessionRequest,
    SetModeRequest,
    UpdateQuantityRequest,
)
from cartwise.services.health_score import health_label, health_score
from cartwise.services.session_service import ShoppingSession, session_registry
from cartwise.services.store_totals import order_for_checkout

logger = logging.getLogger(__name__)

router = APIRouter()


def _cart_payload(session: ShoppingSession) -> dict:
    lines = session.snapshot()
    score = health_score(lines)
    return {
        "session_id": session.id,
        "mode": session.mode,
        "items": [line.to_dict() for line in lines],
        "count": len(lines),
        "health_score": score,
        "health_label": health_label(score),
    }


@router.post("", status_code=201)
async def create_session(req: CreateSessionRequest | None = None):
    """Start a shopping session."""
    session = session_registry.create(mode=req.mode if req else "pickup")
    return {"session_id": session.id, "mode": session.mode}


@router.delete("/{session_id}")
async def end_session(session_id: str):
    """End a session; its frozen recommendation and chat window go with it."""
    if not session_registry.end(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"deleted": True}


@router.get("/{session_id}/cart")
async def get_cart(session: ShoppingSession = Depends(get_session)):
    return _cart_payload(session)


@router.post("/{session_id}/cart/items", status_code=201)
async def add_item(req: AddItemRequest, session: ShoppingSession = Depends(get_session)):
    """Add a product to the cart (or bump its quantity)."""
    session.add_item(
        product_id=req.product_id,
        name=req.name,
        prices=req.prices,
        category=req.category,
        quantity=req.quantity,
    )
    return _cart_payload(session)


@router.patch("/{session_id}/cart/items/{product_id}")
async def update_item(
    product_id: str,
    req: UpdateQuantityRequest,
    session: ShoppingSession = Depends(get_session),
):
    """Change a line's quantity; 0 or less removes it."""
    if not session.has_item(product_id):
        raise HTTPException(status_code=404, detail="Item not in cart")
    session.update_quantity(product_id, req.quantity)
    return _cart_payload(session)


@router.delete("/{session_id}/cart/items/{product_id}")
async def remove_item(product_id: str, session: ShoppingSession = Depends(get_session)):
    if not session.remove_item(product_id):
        raise HTTPException(status_code=404, detail="Item not in cart")
    return _cart_payload(session)


@router.put("/{session_id}/mode")
async def set_mode(req: SetModeRequest, session: ShoppingSession = Depends(get_session)):
    """Switch fulfillment mode. Totals follow; a frozen recommendation does not."""
    session.set_mode(req.mode)
    return {"session_id": session.id, "mode": session.mode}


@router.get("/{session_id}/totals")
async def get_totals(session: ShoppingSession = Depends(get_session)):
    """Per-store totals, cheapest first."""
    totals = session.store_totals()
    return {
        "mode": session.mode,
        "stores": [t.to_dict() for t in totals],
        "cheapest": totals[0].to_dict() if totals else None,
    }


@router.get("/{session_id}/recommendation")
async def get_recommendation(session: ShoppingSession = Depends(get_session)):
    """The session's recommendation; computed on first read, then frozen."""
    rec = session.recommendation()
    return {
        "recommendation": rec.to_dict() if rec else None,
        "stale": session.recommendation_is_stale(),
    }


@router.post("/{session_id}/recommendation/reset")
async def reset_recommendation(session: ShoppingSession = Depends(get_session)):
    """Drop the frozen recommendation so the next read recomputes it."""
    session.reset_recommendation()
    logger.info(f"Session {session.id} recommendation reset")
    return {"reset": True}


@router.get("/{session_id}/checkout-stores")
async def get_checkout_stores(session: ShoppingSession = Depends(get_session)):
    """Stores for the checkout picker, badged cheapest / recommended."""
    totals = session.store_totals()
    rec = session.recommendation()
    ordered = order_for_checkout(totals, rec.store.store_key if rec else None)
    return {"stores": [s.to_dict() for s in ordered]}
