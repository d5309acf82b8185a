# backend/services/catalog.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from errors import NotFound, StorageError, ValidationError
from models.product import Product, ProductReview
from utils.money import to_money, to_stock

logger = logging.getLogger(__name__)


def get_product(db: Session, product_id: int) -> Product:
    try:
        product = db.query(Product).filter(Product.id == product_id).first()
    except SQLAlchemyError as e:
        logger.error("Product lookup failed for %s: %s", product_id, e)
        raise StorageError(f"Could not load product {product_id}") from e
    if not product:
        raise NotFound("Product", product_id)
    return product


def product_to_dict(product: Product) -> dict:
    # Read contract consumed by the cart and checkout
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "image": product.image or "",
        "stock": product.stock,
        "category": product.category,
    }


def list_products(
    db: Session,
    category: Optional[str] = None,
    page: int = 1,
    page_size: int = 12,
) -> Tuple[List[Product], int]:
    query = db.query(Product)
    if category:
        query = query.filter(func.lower(Product.category) == category.strip().lower())
    query = query.order_by(Product.id.desc())
    try:
        total = query.count()
        items = query.offset((page - 1) * page_size).limit(page_size).all()
    except SQLAlchemyError as e:
        raise StorageError("Could not list products") from e
    return items, total


def list_categories(db: Session) -> List[str]:
    try:
        rows = db.query(Product.category).distinct().filter(Product.category != None).order_by(Product.category).all()  # noqa: E711
    except SQLAlchemyError as e:
        raise StorageError("Could not list categories") from e
    return [row[0] for row in rows]


def create_product(db: Session, data: dict) -> Product:
    """Insert a catalog entry with normalized price and whole-number stock."""
    try:
        price = to_money(data.get("price"))
        list_price = data.get("list_price")
        list_price = to_money(list_price) if list_price is not None else None
        stock = to_stock(data.get("stock"))
    except ValueError as e:
        raise ValidationError(str(e))

    name = (data.get("name") or "").strip()
    category = (data.get("category") or "").strip()
    blank = {field: "must not be blank" for field, value in (("name", name), ("category", category)) if not value}
    if blank:
        raise ValidationError("Product " + " and ".join(blank) + " must not be blank", blank)

    product = Product(
        name=name,
        description=data.get("description") or "",
        specifications=data.get("specifications") or "",
        category=category,
        image=data.get("image") or "",
        price=price,
        list_price=list_price,
        stock=stock,
        rating=0,
    )
    db.add(product)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError("Could not create product") from e
    db.refresh(product)
    return product


def add_review(db: Session, product_id: int, rating: int, comment: Optional[str] = None,
               user_id: Optional[int] = None) -> ProductReview:
    product = get_product(db, product_id)
    if not 1 <= int(rating) <= 5:
        raise ValidationError("Rating must be between 1 and 5", {"rating": "out of range"})

    review = ProductReview(product_id=product.id, user_id=user_id, rating=int(rating), comment=comment)
    db.add(review)
    try:
        db.flush()
        # Rating is derived from the reviews on every write
        product.rating = recompute_rating(db, product.id)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Could not save review for product {product_id}") from e
    db.refresh(review)
    return review


def recompute_rating(db: Session, product_id: int) -> float:
    average = db.query(func.avg(ProductReview.rating)).filter(ProductReview.product_id == product_id).scalar()
    return round(float(average), 2) if average is not None else 0.0
