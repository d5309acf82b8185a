from pydantic import BaseModel
from typing import List

class WishlistItemOut(BaseModel):
    product_id: int
    name: str
    image: str = ""
    price: float

class WishlistOut(BaseModel):
    items: List[WishlistItemOut]
    count: int
