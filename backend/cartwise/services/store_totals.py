"""Per-store subtotal, tax, fees and ranking for a cart."""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from cartwise.data.fee_schedule import TAX_RATE, ZERO, fee_for
from cartwise.data.stores import STORE_COLORS, STORE_KEYS, store_name

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


# ---------- Data structures ----------


@dataclass(frozen=True)
class CartLine:
    """A catalog product in the cart with its per-store unit prices.

    A store missing from ``prices`` does not carry the product (price 0).
    Unit prices are rounded to cents on read, so a subtotal is always whole cents.
    """
    product_id: str
    name: str
    quantity: int
    prices: dict[str, Decimal] = field(default_factory=dict)
    category: str = ""

    def price_at(self, store_key: str) -> Decimal:
        price = self.prices.get(store_key)
        if price is None:
            return ZERO
        price = to_cents(Decimal(str(price)))
        return price if price > 0 else ZERO

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "category": self.category,
            "quantity": self.quantity,
            "prices": {k: str(v) for k, v in self.prices.items()},
        }


@dataclass(frozen=True)
class StoreTotal:
    """Rounded cart total at one store."""
    store_key: str
    store: str
    subtotal: Decimal
    taxes_and_fees: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "store": self.store,
            "store_key": self.store_key,
            "subtotal": f"{self.subtotal:.2f}",
            "taxes_and_fees": f"{self.taxes_and_fees:.2f}",
            "total": f"{self.total:.2f}",
        }


@dataclass(frozen=True)
class CheckoutStore:
    """A store entry for the checkout picker, with its badges."""
    total: StoreTotal
    icons: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            **self.total.to_dict(),
            "color": STORE_COLORS.get(self.total.store_key),
            "icons": list(self.icons),
        }


# ---------- Calculator ----------


def to_cents(amount: Decimal) -> Decimal:
    """Round half-up to whole cents."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_store_totals(cart, mode: str) -> list[StoreTotal]:
    """Price the cart at every supported store and rank ascending by total.

    Intermediate amounts stay exact; each output field is rounded once. The
    subtotal is always a whole number of cents, so the rounded total equals
    rounded subtotal plus rounded taxes and fees. Ties keep STORE_KEYS order.

    A store that carries none of the cart (subtotal 0) is not a candidate and
    is left out; a store missing only some lines is priced on what it carries.
    """
    lines = tuple(cart or ())
    if not lines:
        return []

    totals = []
    for store_key in STORE_KEYS:
        subtotal = sum(
            (line.price_at(store_key) * max(line.quantity, 0) for line in lines),
            ZERO,
        )
        if subtotal == 0:
            continue
        tax = subtotal * TAX_RATE
        fee = fee_for(store_key, mode, subtotal)
        taxes_and_fees = tax + fee

        totals.append(StoreTotal(
            store_key=store_key,
            store=store_name(store_key),
            subtotal=to_cents(subtotal),
            taxes_and_fees=to_cents(taxes_and_fees),
            total=to_cents(subtotal + taxes_and_fees),
        ))

    totals.sort(key=lambda t: t.total)
    logger.debug(
        f"Store totals ({mode}, {len(lines)} lines): "
        + ", ".join(f"{t.store_key}={t.total}" for t in totals)
    )
    return totals


def order_for_checkout(
    totals: list[StoreTotal],
    recommended_key: str | None = None,
) -> list[CheckoutStore]:
    """Order stores for the checkout picker.

    Cheapest-and-recommended first, then cheapest, then recommended, then the
    rest; each group by total ascending.
    """
    if not totals:
        return []

    cheapest_key = totals[0].store_key

    def badges(t: StoreTotal) -> tuple[str, ...]:
        icons = []
        if t.store_key == cheapest_key:
            icons.append("money")
        if recommended_key and t.store_key == recommended_key:
            icons.append("sparkles")
        return tuple(icons)

    def badge_rank(t: StoreTotal) -> int:
        is_cheapest = t.store_key == cheapest_key
        is_recommended = recommended_key is not None and t.store_key == recommended_key
        if is_cheapest and is_recommended:
            return 3
        if is_cheapest:
            return 2
        if is_recommended:
            return 1
        return 0

    ordered = sorted(totals, key=lambda t: (-badge_rank(t), t.total))
    return [CheckoutStore(total=t, icons=badges(t)) for t in ordered]
