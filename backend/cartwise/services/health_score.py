"""Cart health score from the number of fresh produce items."""

PRODUCE_CATEGORY_MARKERS = ("produce", "fruits", "vegetables")
PRODUCE_NAME_MARKERS = ("organic",)

# produce item count → score; counts past the end of the table score 100
_SCORE_BY_PRODUCE_COUNT = (20, 44, 57, 70, 81, 92, 98)


def is_produce(line) -> bool:
    category = (line.category or "").lower()
    name = (line.name or "").lower()
    return (
        any(marker in category for marker in PRODUCE_CATEGORY_MARKERS)
        or any(marker in name for marker in PRODUCE_NAME_MARKERS)
    )


def produce_count(lines) -> int:
    return sum(line.quantity for line in lines if is_produce(line))


def health_score(lines) -> int:
    """Score 0-100. Empty cart scores 0; an all-produce cart scores 100."""
    lines = tuple(lines or ())
    if not lines:
        return 0

    total_items = sum(line.quantity for line in lines)
    produce = produce_count(lines)

    if produce > 0 and produce == total_items:
        return 100
    if produce >= len(_SCORE_BY_PRODUCE_COUNT):
        return 100
    return _SCORE_BY_PRODUCE_COUNT[produce]


def health_label(score: int) -> str:
    if score >= 85:
        return "Excellent"
    if score >= 70:
        return "Good"
    if score >= 50:
        return "Fair"
    return "Needs Improvement"
