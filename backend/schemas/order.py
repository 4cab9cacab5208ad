from pydantic import BaseModel, ConfigDict, Field
from typing import List
from datetime import datetime

from schemas.cart import MAX_LINE_QUANTITY


# A line item as captured by the cart: price is the line price, not the unit price
class OrderItemIn(BaseModel):
    product_id: int
    quantity: int = Field(ge=1, le=MAX_LINE_QUANTITY)
    price: float = Field(ge=0)


class OrderCreate(BaseModel):
    items: List[OrderItemIn] = Field(min_length=1)
    total_price: float = Field(ge=0)


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    quantity: int
    price: float


# Output schema representing the full order details
class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    items: List[OrderItemOut]
    total_price: float
    created_at: datetime
