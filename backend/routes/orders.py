# backend/routes/orders.py
from typing import List
from fastapi import APIRouter, Depends, Request, Query
from sqlalchemy.orm import Session

from database import get_db
import logging
from errors import NotFound, ValidationError
from utils.tokenJWT import get_current_user, is_admin, role_required
from utils.audit import write_log
from utils.session import get_session_id, get_storage
from models.users import User
from models.order import Order
from services import orders as order_service
from services.cart import Cart
from services.payments import pay_order
from services.storage import KeyValueStorage
from schemas.log import LogResponse
from schemas.order import (
    OrderCreate, CheckoutPayload, OrderResponse, OrdersPage, OrderItemOut,
    ShippingAddressOut, ShipPayload, PaymentStatusPatch, PaymentAttempt,
)

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)

def _client_ip(request: Request):
    return request.client.host if request.client else None

# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    items: List[OrderItemOut] = [
        OrderItemOut(
            product_id=it.product_id,
            name=it.name,
            price=float(it.price),
            quantity=it.quantity,
            image=it.image,
            line_total=float(it.line_total),
        )
        for it in order.items
    ]
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        items=items,
        shipping_address=ShippingAddressOut(**order.shipping_address),
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        order_status=order.order_status,
        subtotal=float(order.subtotal),
        shipping=float(order.shipping),
        tax=float(order.tax),
        total=float(order.total),
        tracking_number=order.tracking_number,
        estimated_delivery=order.estimated_delivery,
        notes=order.notes,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )

# Owners see their own orders; admins see all. Anything else looks missing.
def _owned_order(db: Session, order_id: int, user: User) -> Order:
    order = order_service.get_order(db, order_id)
    if order.user_id != user.id and not is_admin(user):
        raise NotFound("Order", order_id)
    return order

def _status_change(db, request, user, order: Order, old_status):
    write_log(db, user_id=user.id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
              ip=_client_ip(request),
              order_id=order.id, meta={"old": old_status.value, "new": order.order_status.value})


# Place an order from an explicit list of lines
@router.post("", response_model=OrderResponse, status_code=201)
def create_order(
    payload: OrderCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = order_service.create_order(db, current_user.id, payload)
    write_log(db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
              ip=_client_ip(request),
              order_id=order.id, meta={"order_number": order.order_number, "total": str(order.total)})
    return _order_to_out(order)


# Place an order from the session cart and empty the cart afterwards
@router.post("/checkout", response_model=OrderResponse, status_code=201)
def checkout(
    payload: CheckoutPayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    session_id: str = Depends(get_session_id),
    storage: KeyValueStorage = Depends(get_storage),
):
    cart = Cart.load(storage, session_id)
    if cart.is_empty():
        raise ValidationError("Cart is empty", {"lines": "cart has no items"})

    data = payload.model_dump()
    data["lines"] = cart.to_order_lines()
    order = order_service.create_order(db, current_user.id, data)
    cart.clear()

    write_log(db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
              ip=_client_ip(request),
              order_id=order.id, meta={"order_number": order.order_number, "source": "cart"})
    return _order_to_out(order)


# List the current user's orders, newest first
@router.get("", response_model=OrdersPage)
def list_my_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows, total = order_service.list_orders_for_user(db, current_user.id, page=page, page_size=page_size)
    return {"items": [_order_to_out(o) for o in rows], "total": total, "page": page, "page_size": page_size}


@router.get("/number/{order_number}", response_model=OrderResponse)
def get_order_by_number(
    order_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = order_service.get_order_by_number(db, order_number)
    if order.user_id != current_user.id and not is_admin(current_user):
        raise NotFound("Order", order_number)
    return _order_to_out(order)


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _order_to_out(_owned_order(db, order_id, current_user))


# Status and payment history of an order, oldest first
@router.get("/{order_id}/history", response_model=List[LogResponse])
def get_order_history(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _owned_order(db, order_id, current_user)
    return order_service.get_order_history(db, order_id)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = _owned_order(db, order_id, current_user)
    old_status = order.order_status
    order = order_service.cancel_order(db, order_id)
    write_log(db, user_id=current_user.id, action="ORDER_CANCEL", resource="orders", status="SUCCESS",
              ip=_client_ip(request), order_id=order.id, meta={"old": old_status.value})
    return _order_to_out(order)


# Fulfillment transitions (admin only)
@router.post("/{order_id}/confirm", response_model=OrderResponse)
def confirm_order(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    old_status = order_service.get_order(db, order_id).order_status
    order = order_service.confirm_order(db, order_id)
    _status_change(db, request, current_user, order, old_status)
    return _order_to_out(order)


@router.post("/{order_id}/ship", response_model=OrderResponse)
def ship_order(
    order_id: int,
    payload: ShipPayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    old_status = order_service.get_order(db, order_id).order_status
    order = order_service.mark_shipped(db, order_id, payload.tracking_number)
    _status_change(db, request, current_user, order, old_status)
    return _order_to_out(order)


@router.post("/{order_id}/deliver", response_model=OrderResponse)
def deliver_order(
    order_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    old_status = order_service.get_order(db, order_id).order_status
    order = order_service.mark_delivered(db, order_id)
    _status_change(db, request, current_user, order, old_status)
    return _order_to_out(order)


@router.patch("/{order_id}/payment-status", response_model=OrderResponse)
def update_payment_status(
    order_id: int,
    payload: PaymentStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    order = order_service.update_payment_status(db, order_id, payload.status)
    write_log(db, user_id=current_user.id, action="ORDER_PAYMENT", resource="orders", status="SUCCESS",
              ip=_client_ip(request), order_id=order.id, meta={"payment_status": order.payment_status.value})
    return _order_to_out(order)


# Simulated payment for card/UPI orders
@router.post("/{order_id}/pay", response_model=OrderResponse)
def pay_for_order(
    order_id: int,
    payload: PaymentAttempt,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _owned_order(db, order_id, current_user)
    order, result = pay_order(db, order_id, succeed=payload.succeed)
    write_log(db, user_id=current_user.id, action="ORDER_PAYMENT", resource="orders",
              status="SUCCESS" if result.success else "FAIL", ip=_client_ip(request),
              order_id=order.id, meta={"transaction_id": result.transaction_id, "message": result.message})
    return _order_to_out(order)
