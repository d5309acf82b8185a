# backend/services/orders.py
"""Order placement and the order status state machine.

Orders are created once from a validated ``OrderCreate`` payload and never
deleted. After placement only the status axes and shipping metadata move,
and every such change is a conditional UPDATE keyed on the status the caller
observed, so two concurrent transitions cannot both win.
"""
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from config import settings
from errors import (
    DuplicateIdentifier, InvalidTransition, NotFound, OrderCreationFailed,
    StorageError, ValidationError,
)
from models.log import Log
from models.order import Order, OrderItem, OrderStatus, PaymentStatus
from schemas.order import OrderCreate
from utils.money import compute_totals, line_total, to_money
from utils.order_number import generate_order_number

logger = logging.getLogger(__name__)

# Allowed order_status moves; statuses missing as keys are terminal
ALLOWED_TRANSITIONS = {
    OrderStatus.PROCESSING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
}

# cancel_order is stricter than the machine: only before confirmation
CANCELLABLE_FROM = {OrderStatus.PROCESSING}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def validate_order_input(data: Union[OrderCreate, dict]) -> OrderCreate:
    """Turn a raw checkout payload into a validated ``OrderCreate``."""
    if isinstance(data, OrderCreate):
        return data
    try:
        return OrderCreate.model_validate(data)
    except PydanticValidationError as e:
        errors = {}
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"]) or "__root__"
            errors.setdefault(field, err["msg"])
        first_field, first_message = next(iter(errors.items()))
        raise ValidationError(f"Invalid order: {first_field}: {first_message}", errors) from e


def _subtotal(payload: OrderCreate) -> Decimal:
    # Always recomputed from the lines; a client-sent subtotal is never read
    return sum((line_total(line.price, line.quantity) for line in payload.lines), Decimal("0"))


def _build_order(user_id: int, payload: OrderCreate, order_number: str) -> Order:
    totals = compute_totals(_subtotal(payload))
    address = payload.shipping_address

    order = Order(
        order_number=order_number,
        user_id=user_id,
        payment_method=payload.payment_method,
        payment_status=PaymentStatus.PENDING,
        order_status=OrderStatus.PROCESSING,
        subtotal=totals["subtotal"],
        shipping=totals["shipping"],
        tax=totals["tax"],
        total=totals["total"],
        shipping_first_name=address.first_name,
        shipping_last_name=address.last_name,
        shipping_email=str(address.email),
        shipping_street=address.street,
        shipping_city=address.city,
        shipping_state=address.state,
        shipping_postal_code=address.postal_code,
        shipping_country=address.country,
        notes=(payload.notes or None),
    )
    order.items = [
        OrderItem(
            product_id=line.product_id,
            name=line.name,
            price=to_money(line.price),
            quantity=line.quantity,
            image=line.image,
        )
        for line in payload.lines
    ]
    return order


def _is_order_number_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "order_number" in message or "uq_orders_order_number" in message


def _insert_order(db: Session, order: Order) -> Order:
    db.add(order)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if _is_order_number_conflict(e):
            raise DuplicateIdentifier(order.order_number) from e
        logger.error("Order insert rejected by database: %s", e)
        raise StorageError("Could not persist order") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Order insert failed: %s", e)
        raise StorageError("Could not persist order") from e
    db.refresh(order)
    return order


def create_order(db: Session, user_id: int, data: Union[OrderCreate, dict]) -> Order:
    """Validate, price and persist a new order.

    Raises ``ValidationError`` before touching the database. An order number
    collision is retried with a fresh number up to
    ``ORDER_NUMBER_MAX_ATTEMPTS`` times and then surfaces as
    ``OrderCreationFailed``.
    """
    payload = validate_order_input(data)
    attempts = max(1, settings.ORDER_NUMBER_MAX_ATTEMPTS)

    for attempt in range(1, attempts + 1):
        order = _build_order(user_id, payload, generate_order_number())
        try:
            order = _insert_order(db, order)
        except DuplicateIdentifier as e:
            logger.warning("Order number %s taken (attempt %s/%s)", e.order_number, attempt, attempts)
            continue
        logger.info("Order %s created for user %s, total %s", order.order_number, user_id, order.total)
        return order

    raise OrderCreationFailed(attempts)


def get_order(db: Session, order_id: int) -> Order:
    try:
        order = db.query(Order).options(selectinload(Order.items)).filter(Order.id == order_id).first()
    except SQLAlchemyError as e:
        raise StorageError(f"Could not load order {order_id}") from e
    if not order:
        raise NotFound("Order", order_id)
    return order


def get_order_by_number(db: Session, order_number: str) -> Order:
    try:
        order = (
            db.query(Order).options(selectinload(Order.items))
            .filter(Order.order_number == order_number).first()
        )
    except SQLAlchemyError as e:
        raise StorageError(f"Could not load order {order_number}") from e
    if not order:
        raise NotFound("Order", order_number)
    return order


def list_orders_for_user(
    db: Session,
    user_id: int,
    page: Optional[int] = None,
    page_size: int = 10,
) -> Tuple[List[Order], int]:
    """Return the user's orders, newest first, with the unpaginated count."""
    query = db.query(Order).options(selectinload(Order.items)).filter(Order.user_id == user_id)
    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    try:
        total = query.count()
        if page is not None:
            query = query.offset((page - 1) * page_size).limit(page_size)
        return query.all(), total
    except SQLAlchemyError as e:
        raise StorageError(f"Could not list orders for user {user_id}") from e


def _conditional_update(db: Session, order_id: int, expected: OrderStatus, target: OrderStatus,
                        values: dict) -> Order:
    """Apply ``values`` only if the row still has status ``expected``."""
    values = dict(values)
    values["updated_at"] = datetime.now(timezone.utc)
    try:
        updated = (
            db.query(Order)
            .filter(Order.id == order_id, Order.order_status == expected)
            .update(values, synchronize_session=False)
        )
        if updated != 1:
            db.rollback()
            # Lost a race: report against whatever is stored now
            current = db.query(Order.order_status).filter(Order.id == order_id).scalar()
            if current is None:
                raise NotFound("Order", order_id)
            raise InvalidTransition(order_id, OrderStatus(current).value, target.value)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Could not update order {order_id}") from e

    db.expire_all()
    return get_order(db, order_id)


def transition_order(db: Session, order_id: int, target: OrderStatus, **values) -> Order:
    target = OrderStatus(target)
    order = get_order(db, order_id)
    current = OrderStatus(order.order_status)
    if not can_transition(current, target):
        raise InvalidTransition(order_id, current.value, target.value)

    values["order_status"] = target
    order = _conditional_update(db, order_id, current, target, values)
    logger.info("Order %s moved %s -> %s", order.order_number, current.value, target.value)
    return order


def cancel_order(db: Session, order_id: int) -> Order:
    """Cancel an order that has not been confirmed yet. Money fields are untouched."""
    order = get_order(db, order_id)
    current = OrderStatus(order.order_status)
    if current not in CANCELLABLE_FROM:
        raise InvalidTransition(order_id, current.value, OrderStatus.CANCELLED.value)
    return transition_order(db, order_id, OrderStatus.CANCELLED)


def confirm_order(db: Session, order_id: int) -> Order:
    return transition_order(db, order_id, OrderStatus.CONFIRMED)


def mark_shipped(db: Session, order_id: int, tracking_number: str) -> Order:
    tracking_number = (tracking_number or "").strip()
    if not tracking_number:
        raise ValidationError("Tracking number is required", {"tracking_number": "must not be blank"})
    estimated = datetime.now(timezone.utc) + timedelta(days=settings.DELIVERY_ESTIMATE_DAYS)
    return transition_order(
        db, order_id, OrderStatus.SHIPPED,
        tracking_number=tracking_number,
        estimated_delivery=estimated,
    )


def mark_delivered(db: Session, order_id: int) -> Order:
    return transition_order(db, order_id, OrderStatus.DELIVERED)


def update_payment_status(db: Session, order_id: int, status: Union[PaymentStatus, str]) -> Order:
    """Set the payment axis to any known status; it is independent of order_status."""
    try:
        status = PaymentStatus(status)
    except ValueError:
        allowed = ", ".join(s.value for s in PaymentStatus)
        raise ValidationError(f"Unknown payment status {status!r}; expected one of {allowed}",
                              {"status": "invalid"})

    try:
        updated = (
            db.query(Order)
            .filter(Order.id == order_id)
            .update({"payment_status": status, "updated_at": datetime.now(timezone.utc)},
                    synchronize_session=False)
        )
        if not updated:
            db.rollback()
            raise NotFound("Order", order_id)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Could not update payment status of order {order_id}") from e

    db.expire_all()
    order = get_order(db, order_id)
    logger.info("Order %s payment status set to %s", order.order_number, status.value)
    return order


def get_order_history(db: Session, order_id: int) -> List[Log]:
    """Audit entries recorded for an order, oldest first."""
    get_order(db, order_id)
    return (
        db.query(Log)
        .filter(Log.order_id == order_id)
        .order_by(Log.ts.asc(), Log.id.asc())
        .all()
    )
