from decimal import Decimal

from cartwise.services.store_totals import CartLine, StoreTotal


class FakeClock:
    """Callable clock the test moves by hand."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FixedRandom:
    """Random source that always returns the same value."""

    def __init__(self, value: float = 0.0):
        self.value = value

    def random(self) -> float:
        return self.value


class SequenceRandom:
    """Random source that replays a fixed sequence."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


def make_line(product_id="a", quantity=1, category="", name=None, **prices) -> CartLine:
    return CartLine(
        product_id=product_id,
        name=name or f"Item {product_id.upper()}",
        quantity=quantity,
        prices={k: Decimal(v) for k, v in prices.items()},
        category=category,
    )


def make_total(key, amount, store=None) -> StoreTotal:
    amount = Decimal(amount)
    return StoreTotal(
        store_key=key,
        store=store or key,
        subtotal=amount,
        taxes_and_fees=Decimal("0.00"),
        total=amount,
    )
