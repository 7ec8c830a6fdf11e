from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, Field

FulfillmentMode = Literal["pickup", "delivery", "instore"]

Price = Annotated[Decimal, Field(ge=0, decimal_places=2)]


class CreateSessionRequest(BaseModel):
    mode: FulfillmentMode = "pickup"


class AddItemRequest(BaseModel):
    product_id: str
    name: str
    category: str = ""
    quantity: int = Field(default=1, ge=1)
    prices: dict[str, Price] = Field(default_factory=dict)  # store key → unit price


class UpdateQuantityRequest(BaseModel):
    quantity: int  # 0 or less removes the line


class SetModeRequest(BaseModel):
    mode: FulfillmentMode
