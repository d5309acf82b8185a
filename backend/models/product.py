# backend/models/product.py
from sqlalchemy import Column, Integer, String, Text, Float, Numeric, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Catalog entry read by the cart and checkout when snapshotting line items.
# Price and stock are guarded by check constraints; rating is derived
# from reviews and rewritten whenever a review is added.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    specifications = Column(Text, nullable=False, default="")
    category = Column(String, nullable=False, index=True)
    image = Column(String, nullable=False, default="")

    price = Column(Numeric(12, 2), CheckConstraint("price >= 0"), nullable=False)
    # Original/list price shown struck through next to the selling price
    list_price = Column(Numeric(12, 2), CheckConstraint("list_price >= 0"), nullable=True)

    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)
    rating = Column(Float, CheckConstraint("rating >= 0 AND rating <= 5"), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    reviews = relationship("ProductReview", back_populates="product", cascade="all, delete-orphan",
                           order_by="ProductReview.id")


class ProductReview(Base):
    __tablename__ = "product_reviews"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    rating = Column(Integer, CheckConstraint("rating >= 1 AND rating <= 5"), nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="reviews")
