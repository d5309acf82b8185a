# backend/routes/products.py
from typing import Optional, List
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user, role_required
from utils.audit import write_log
from models.users import User
from models.product import Product
from services import catalog
import schemas.product as product_schemas

router = APIRouter(prefix="/products", tags=["Products"])


def _product_to_out(product: Product) -> product_schemas.ProductOut:
    return product_schemas.ProductOut(
        id=product.id,
        name=product.name,
        description=product.description or "",
        specifications=product.specifications or "",
        category=product.category,
        image=product.image or "",
        price=float(product.price),
        list_price=float(product.list_price) if product.list_price is not None else None,
        stock=product.stock,
        rating=product.rating or 0,
    )


@router.get("", response_model=product_schemas.ProductListPage)
def list_products(
    category: Optional[str] = Query(None, description="Filter by category"),
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    db: Session = Depends(get_db),
):
    items, total = catalog.list_products(db, category=category, page=page, page_size=page_size)
    return {"items": [_product_to_out(p) for p in items], "total": total, "page": page, "page_size": page_size}


@router.get("/categories", response_model=List[str])
def get_categories(db: Session = Depends(get_db)):
    return catalog.list_categories(db)


@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _product_to_out(catalog.get_product(db, product_id))


@router.post("", response_model=product_schemas.ProductOut, status_code=201)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    product = catalog.create_product(db, payload.model_dump())
    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products", status="SUCCESS",
              ip=request.client.host if request.client else None, meta={"product_id": product.id})
    return _product_to_out(product)


@router.get("/{product_id}/reviews", response_model=List[product_schemas.ReviewOut])
def list_reviews(product_id: int, db: Session = Depends(get_db)):
    return catalog.get_product(db, product_id).reviews


@router.post("/{product_id}/reviews", response_model=product_schemas.ReviewOut, status_code=201)
def add_review(
    product_id: int,
    payload: product_schemas.ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return catalog.add_review(db, product_id, payload.rating, payload.comment, user_id=current_user.id)
