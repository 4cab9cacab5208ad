from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

# Upper bound for one line's quantity, keeps quantity and line price inside column range
MAX_LINE_QUANTITY = 10_000

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(ge=1, le=MAX_LINE_QUANTITY)

# Response schema for a single cart line item
class CartItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    name: Optional[str] = None
    quantity: int
    price: float

# Response schema for the entire cart summary
class CartOut(BaseModel):
    id: int
    user_id: int
    items: List[CartItemOut]
    total_price: float
