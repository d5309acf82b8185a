# backend/routes/wishlist.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from services.catalog import get_product
from services.storage import KeyValueStorage
from services.wishlist import Wishlist
from schemas.wishlist import WishlistOut, WishlistItemOut
from utils.session import get_storage
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])

# Wishlists belong to signed-in users, unlike the session cart
def _load_wishlist(
    current_user: User = Depends(get_current_user),
    storage: KeyValueStorage = Depends(get_storage),
) -> Wishlist:
    return Wishlist(storage, current_user.id)

def _wishlist_to_out(wishlist: Wishlist) -> WishlistOut:
    items = [
        WishlistItemOut(product_id=it.product_id, name=it.name, image=it.image, price=float(it.price))
        for it in wishlist.list()
    ]
    return WishlistOut(items=items, count=wishlist.count())

@router.get("", response_model=WishlistOut)
def get_wishlist(wishlist: Wishlist = Depends(_load_wishlist)):
    return _wishlist_to_out(wishlist)

@router.post("/{product_id}", response_model=WishlistOut)
def add_to_wishlist(product_id: int, wishlist: Wishlist = Depends(_load_wishlist), db: Session = Depends(get_db)):
    product = get_product(db, product_id)
    if not wishlist.add(product):
        raise HTTPException(status_code=409, detail="Product already in wishlist")
    return _wishlist_to_out(wishlist)

@router.delete("/{product_id}", response_model=WishlistOut)
def remove_from_wishlist(product_id: int, wishlist: Wishlist = Depends(_load_wishlist)):
    wishlist.remove(product_id)
    return _wishlist_to_out(wishlist)

@router.delete("", response_model=WishlistOut)
def clear_wishlist(wishlist: Wishlist = Depends(_load_wishlist)):
    wishlist.clear()
    return _wishlist_to_out(wishlist)
