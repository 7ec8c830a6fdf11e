"""Per-store, per-mode fulfillment fee rules and the flat sales-tax rate.

Every (store, mode) pair resolves to one rule. Pairs missing from the table
are free, which is how in-store shopping is expressed: no in-store entries.
"""

from dataclasses import dataclass
from decimal import Decimal

from cartwise.data.stores import DELIVERY, PICKUP

TAX_RATE = Decimal("0.0875")  # 8.75%, not geography-aware

ZERO = Decimal("0")


@dataclass(frozen=True)
class FlatFee:
    """Same fee regardless of basket size."""
    amount: Decimal

    def apply(self, subtotal: Decimal) -> Decimal:
        return self.amount


@dataclass(frozen=True)
class ThresholdWaivedFee:
    """Fee waived once the subtotal reaches the threshold (inclusive)."""
    amount: Decimal
    free_at: Decimal

    def apply(self, subtotal: Decimal) -> Decimal:
        return ZERO if subtotal >= self.free_at else self.amount


FREE = FlatFee(ZERO)

FEE_SCHEDULE: dict[tuple[str, str], FlatFee | ThresholdWaivedFee] = {
    # Pickup
    ("walmart", PICKUP): FlatFee(Decimal("1.99")),
    ("sams", PICKUP): ThresholdWaivedFee(Decimal("4.99"), free_at=Decimal("50")),
    ("heb", PICKUP): FREE,
    ("aldi", PICKUP): FREE,
    ("kroger", PICKUP): FREE,
    ("target", PICKUP): FREE,
    # Delivery
    ("walmart", DELIVERY): ThresholdWaivedFee(Decimal("7.95"), free_at=Decimal("35")),
    ("sams", DELIVERY): ThresholdWaivedFee(Decimal("12.00"), free_at=Decimal("50")),
    ("heb", DELIVERY): FlatFee(Decimal("4.95")),
    ("aldi", DELIVERY): ThresholdWaivedFee(Decimal("3.99"), free_at=Decimal("35")),
    ("kroger", DELIVERY): ThresholdWaivedFee(Decimal("4.95"), free_at=Decimal("35")),
    ("target", DELIVERY): ThresholdWaivedFee(Decimal("9.99"), free_at=Decimal("35")),
}


def fee_for(store_key: str, mode: str, subtotal: Decimal) -> Decimal:
    """Fulfillment fee for one store's basket under the given mode."""
    rule = FEE_SCHEDULE.get((store_key, mode), FREE)
    return rule.apply(subtotal)
