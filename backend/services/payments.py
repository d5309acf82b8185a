# backend/services/payments.py
import logging

from sqlalchemy.orm import Session

from errors import ValidationError
from models.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from services.orders import get_order, update_payment_status
from utils.payment_gateway import ChargeResult, payment_gateway

logger = logging.getLogger(__name__)


def pay_order(db: Session, order_id: int, succeed: bool = True) -> tuple[Order, ChargeResult]:
    """Run a simulated charge for an order and record the outcome."""
    order = get_order(db, order_id)

    if order.payment_method == PaymentMethod.COD:
        raise ValidationError("Cash on delivery orders are paid on delivery", {"payment_method": "cod"})
    if order.order_status == OrderStatus.CANCELLED:
        raise ValidationError("Cannot pay for a cancelled order", {"order_status": "cancelled"})
    if order.payment_status not in (PaymentStatus.PENDING, PaymentStatus.FAILED):
        raise ValidationError(f"Order is already {order.payment_status.value}", {"payment_status": "settled"})

    result = payment_gateway.charge(order.order_number, order.total, order.payment_method.value, succeed=succeed)
    status = PaymentStatus.COMPLETED if result.success else PaymentStatus.FAILED
    order = update_payment_status(db, order.id, status)
    return order, result
