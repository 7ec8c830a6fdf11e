"""Supported retail chains and fulfillment modes.

STORE_KEYS order is the canonical order used everywhere a stable tie-break is
needed (calculator sort, scorer winner selection, checkout picker).
"""

STORE_KEYS: tuple[str, ...] = ("walmart", "heb", "aldi", "target", "kroger", "sams")

STORE_NAMES: dict[str, str] = {
    "walmart": "Walmart",
    "heb": "H-E-B",
    "aldi": "Aldi",
    "target": "Target",
    "kroger": "Kroger",
    "sams": "Sam's Club",
}

# Brand colours used by the checkout picker
STORE_COLORS: dict[str, str] = {
    "heb": "#e31837",
    "walmart": "#004c91",
    "target": "#cc0000",
    "kroger": "#0f4c81",
    "sams": "#00529c",
    "aldi": "#ff6900",
}

PICKUP = "pickup"
DELIVERY = "delivery"
INSTORE = "instore"

FULFILLMENT_MODES: tuple[str, ...] = (PICKUP, DELIVERY, INSTORE)


def store_name(store_key: str) -> str:
    """Display name for a store key, falling back to the key itself."""
    return STORE_NAMES.get(store_key, store_key)
