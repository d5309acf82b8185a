from pydantic import BaseModel, Field
from typing import List

# Request schema for adding a product to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)

# Request schema for updating a line quantity; values below 1 are floored to 1
class CartUpdateItem(BaseModel):
    quantity: int

# Response schema for a single cart line
class CartLineOut(BaseModel):
    product_id: int
    name: str
    image: str = ""
    price: float
    quantity: int
    line_total: float

class CartTotalsOut(BaseModel):
    subtotal: float
    shipping: float
    tax: float
    total: float
    item_count: int

# Response schema for the entire cart summary
class CartOut(BaseModel):
    items: List[CartLineOut]
    totals: CartTotalsOut
    warnings: List[str] = []
