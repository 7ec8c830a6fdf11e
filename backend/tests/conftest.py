import pytest

from cartwise.services.session_service import session_registry
from tests.helpers import make_line


@pytest.fixture
def item_a_cart():
    """Item A x2 at Walmart $3.00 and H-E-B $2.50, not carried elsewhere."""
    return [make_line("a", quantity=2, walmart="3.00", heb="2.50")]


@pytest.fixture(autouse=True)
def _clean_registry():
    yield
    session_registry.end_all()
