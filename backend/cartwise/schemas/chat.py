from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from cartwise.schemas.cart import FulfillmentMode


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    variant: Literal["shopping", "dietary"] = "shopping"


class RelayStore(BaseModel):
    store: str = Field(min_length=1)
    store_key: str | None = Field(default=None, alias="storeKey")
    subtotal: Decimal = Decimal("0")
    taxes_and_fees: Decimal = Field(default=Decimal("0"), alias="taxesAndFees")
    total: Decimal = Decimal("0")

    model_config = {"populate_by_name": True}


class RelayRecommendation(BaseModel):
    store: RelayStore
    reason: str = ""


class RelayRequest(BaseModel):
    """Stateless relay body, same field names the storefront sends."""
    user_message: str = Field(alias="userMessage", min_length=1)
    recommendation: RelayRecommendation
    store_totals: list[RelayStore] = Field(default_factory=list, alias="storeTotals")
    shopping_type: FulfillmentMode = Field(default="pickup", alias="shoppingType")

    model_config = {"populate_by_name": True}
