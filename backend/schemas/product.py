# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Schema for creating a new product. Stock is floored to a whole number.
class ProductCreate(ORMBase):
    name: str = Field(min_length=1)
    description: str = ""
    specifications: str = ""
    category: str = Field(min_length=1)
    image: str = ""
    price: float = Field(ge=0)
    list_price: Optional[float] = Field(default=None, ge=0)
    stock: float = Field(default=0, ge=0)

    @field_validator("name", "category")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ProductOut(ORMBase):
    id: int
    name: str
    description: str = ""
    specifications: str = ""
    category: str
    image: str = ""
    price: float
    list_price: Optional[float] = None
    stock: int
    rating: float


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewOut(ORMBase):
    id: int
    product_id: int
    user_id: Optional[int] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
