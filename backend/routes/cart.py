# backend/routes/cart.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from services.cart import Cart
from services.catalog import get_product
from services.storage import KeyValueStorage
from schemas.cart import CartAddItem, CartUpdateItem, CartOut, CartLineOut, CartTotalsOut
from utils.session import get_session_id, get_storage

router = APIRouter(prefix="/cart", tags=["Cart"])

def _load_cart(
    session_id: str = Depends(get_session_id),
    storage: KeyValueStorage = Depends(get_storage),
) -> Cart:
    return Cart.load(storage, session_id)

def _cart_to_out(cart: Cart) -> CartOut:
    items_out = [
        CartLineOut(
            product_id=line.product_id,
            name=line.name,
            image=line.image,
            price=float(line.price),
            quantity=line.quantity,
            line_total=float(line.line_total),
        )
        for line in cart.list()
    ]
    totals = cart.totals()
    return CartOut(
        items=items_out,
        totals=CartTotalsOut(
            subtotal=float(totals["subtotal"]),
            shipping=float(totals["shipping"]),
            tax=float(totals["tax"]),
            total=float(totals["total"]),
            item_count=totals["item_count"],
        ),
        warnings=cart.warnings,
    )

@router.get("", response_model=CartOut)
def get_cart(cart: Cart = Depends(_load_cart)):
    return _cart_to_out(cart)

@router.post("/items", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    cart: Cart = Depends(_load_cart),
    db: Session = Depends(get_db),
):
    # Unknown products surface as 404 through the NotFound handler
    product = get_product(db, payload.product_id)
    cart.add_item(product, payload.quantity)
    return _cart_to_out(cart)

@router.patch("/items/{product_id}", response_model=CartOut)
def update_cart_item(product_id: int, payload: CartUpdateItem, cart: Cart = Depends(_load_cart)):
    cart.update_quantity(product_id, payload.quantity)
    return _cart_to_out(cart)

@router.delete("/items/{product_id}", response_model=CartOut)
def delete_cart_item(product_id: int, cart: Cart = Depends(_load_cart)):
    cart.remove_item(product_id)
    return _cart_to_out(cart)

@router.delete("", response_model=CartOut)
def clear_cart(cart: Cart = Depends(_load_cart)):
    cart.clear()
    return _cart_to_out(cart)
