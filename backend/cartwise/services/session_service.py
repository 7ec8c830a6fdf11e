"""Shopping sessions — cart, fulfillment mode, frozen recommendation, chat gate.

A session's recommendation is computed once and then frozen: later cart or
mode changes do not alter it until the slot is explicitly reset or the session
is ended and a new one created.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from cartwise.config import settings
from cartwise.data.stores import FULFILLMENT_MODES, PICKUP
from cartwise.services.rate_limiter import CountdownTicker, SlidingWindowRateLimiter
from cartwise.services.recommendation.scorer import Recommendation, score_and_recommend
from cartwise.services.store_totals import CartLine, StoreTotal, compute_store_totals

logger = logging.getLogger(__name__)

UNSET = "unset"
FROZEN = "frozen"
RESET = "reset"


def cart_fingerprint(lines: tuple[CartLine, ...]) -> tuple:
    """Hashable identity of a cart's contents (products, quantities, prices)."""
    return tuple(
        (
            line.product_id,
            line.quantity,
            tuple(sorted((k, str(v)) for k, v in line.prices.items())),
        )
        for line in lines
    )


# ---------- Recommendation slot ----------


class RecommendationSlot:
    """Tri-state holder: unset → frozen → reset → frozen ..."""

    def __init__(self):
        self.state = UNSET
        self.value: Recommendation | None = None
        self.basis: tuple | None = None   # (cart fingerprint, mode) that produced value

    def resolve(self, lines: tuple[CartLine, ...], mode: str, compute) -> Recommendation | None:
        """Return the frozen recommendation, computing it first if not yet frozen.

        ``compute(lines, mode)`` is only called outside the frozen state. A None
        result (empty cart) leaves the slot unfrozen.
        """
        if self.state == FROZEN:
            return self.value

        result = compute(lines, mode)
        if result is None:
            return None

        self.value = result
        self.basis = (cart_fingerprint(lines), mode)
        self.state = FROZEN
        logger.info(f"Recommendation frozen: {result.store.store_key} ({mode})")
        return result

    def reset(self) -> None:
        self.state = RESET
        self.value = None
        self.basis = None

    def is_stale(self, lines: tuple[CartLine, ...], mode: str) -> bool:
        """Whether current inputs differ from the ones the frozen value was built on."""
        if self.state != FROZEN:
            return False
        return self.basis != (cart_fingerprint(lines), mode)


# ---------- Session ----------


@dataclass
class ShoppingSession:
    id: str
    mode: str = PICKUP
    lines: list[CartLine] = field(default_factory=list)
    slot: RecommendationSlot = field(default_factory=RecommendationSlot)
    limiter: SlidingWindowRateLimiter = field(default_factory=SlidingWindowRateLimiter)
    ticker: CountdownTicker | None = None
    countdown: int = 0          # seconds until chat reopens, kept current by the ticker
    tick_interval: float = 1.0
    rng: object | None = None   # random source for the scorer; None = entropy-seeded
    last_seen: float = 0.0

    # ---- Cart ----

    def snapshot(self) -> tuple[CartLine, ...]:
        """Immutable copy of the cart for one computation pass."""
        return tuple(self.lines)

    def add_item(
        self,
        product_id: str,
        name: str,
        prices: dict[str, Decimal],
        category: str = "",
        quantity: int = 1,
    ) -> CartLine:
        """Add a product, or bump its quantity if it is already in the cart."""
        for i, line in enumerate(self.lines):
            if line.product_id == product_id:
                updated = CartLine(
                    product_id=line.product_id,
                    name=line.name,
                    quantity=line.quantity + quantity,
                    prices=line.prices,
                    category=line.category,
                )
                self.lines[i] = updated
                return updated

        line = CartLine(
            product_id=product_id,
            name=name,
            quantity=quantity,
            prices=dict(prices),
            category=category,
        )
        self.lines.append(line)
        return line

    def update_quantity(self, product_id: str, quantity: int) -> CartLine | None:
        """Set a line's quantity; 0 or less removes it. Returns None if removed or absent."""
        if quantity <= 0:
            self.remove_item(product_id)
            return None

        for i, line in enumerate(self.lines):
            if line.product_id == product_id:
                updated = CartLine(
                    product_id=line.product_id,
                    name=line.name,
                    quantity=quantity,
                    prices=line.prices,
                    category=line.category,
                )
                self.lines[i] = updated
                return updated
        return None

    def remove_item(self, product_id: str) -> bool:
        before = len(self.lines)
        self.lines = [line for line in self.lines if line.product_id != product_id]
        return len(self.lines) != before

    def has_item(self, product_id: str) -> bool:
        return any(line.product_id == product_id for line in self.lines)

    def clear(self) -> None:
        self.lines = []

    def set_mode(self, mode: str) -> None:
        if mode not in FULFILLMENT_MODES:
            raise ValueError(f"Unknown fulfillment mode: {mode}")
        self.mode = mode

    # ---- Pricing & recommendation ----

    def store_totals(self) -> list[StoreTotal]:
        return compute_store_totals(self.snapshot(), self.mode)

    def recommendation(self) -> Recommendation | None:
        """The session's frozen recommendation (None while the cart is empty)."""
        lines = self.snapshot()
        if not lines:
            return None
        return self.slot.resolve(lines, self.mode, self._compute_recommendation)

    def reset_recommendation(self) -> None:
        self.slot.reset()

    def recommendation_is_stale(self) -> bool:
        return self.slot.is_stale(self.snapshot(), self.mode)

    def _compute_recommendation(self, lines, mode) -> Recommendation | None:
        return score_and_recommend(compute_store_totals(lines, mode), mode, rng=self.rng)

    # ---- Chat gate ----

    def start_countdown(self) -> None:
        """Start the once-a-second countdown while the chat is rate limited."""
        if self.ticker is None:
            self.ticker = CountdownTicker(
                self.limiter, on_tick=self._on_countdown_tick, interval=self.tick_interval,
            )
        self.countdown = self.limiter.seconds_until_reset()
        self.ticker.start()

    def _on_countdown_tick(self, remaining: int) -> None:
        self.countdown = remaining
        if remaining == 0:
            logger.debug(f"Session {self.id} chat reopened")

    def close(self) -> None:
        if self.ticker is not None:
            self.ticker.cancel()
            self.ticker = None
        self.countdown = 0


# ---------- Registry ----------


class SessionRegistry:
    """In-memory session store. Nothing here outlives the process.

    Sessions idle for ``idle_ttl_seconds`` are ended on the next ``create`` or
    ``get``, which also cancels their countdown ticker.
    """

    def __init__(self, idle_ttl_seconds: float | None = None, clock=time.monotonic):
        self.idle_ttl_seconds = (
            settings.session_idle_ttl_seconds if idle_ttl_seconds is None else idle_ttl_seconds
        )
        self.clock = clock
        self._sessions: dict[str, ShoppingSession] = {}

    def create(self, mode: str = PICKUP) -> ShoppingSession:
        now = self.clock()
        self.sweep(now)
        session = ShoppingSession(id=uuid.uuid4().hex, last_seen=now)
        session.set_mode(mode)
        self._sessions[session.id] = session
        logger.info(f"Session {session.id} started ({mode})")
        return session

    def get(self, session_id: str) -> ShoppingSession | None:
        now = self.clock()
        self.sweep(now)
        session = self._sessions.get(session_id)
        if session is not None:
            session.last_seen = now
        return session

    def end(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info(f"Session {session_id} ended")
        return True

    def end_all(self) -> None:
        for session_id in list(self._sessions):
            self.end(session_id)

    def sweep(self, now: float | None = None) -> int:
        """End sessions idle for at least the TTL. Returns how many were ended."""
        now = self.clock() if now is None else now
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if now - session.last_seen >= self.idle_ttl_seconds
        ]
        for session_id in expired:
            self.end(session_id)
        if expired:
            logger.info(f"Expired {len(expired)} idle session(s)")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


session_registry = SessionRegistry()
