# backend/models/order.py
import enum
from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey, DateTime, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base


class OrderStatus(str, enum.Enum):
    PROCESSING = "processing"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    CARD = "card"
    UPI = "upi"
    COD = "cod"


def _enum_column(enum_cls, name):
    # Persist the lower-case values rather than the member names
    return Enum(enum_cls, name=name, native_enum=False,
                values_callable=lambda members: [m.value for m in members])


# A placed order. Lines, address and money fields are copied in at creation
# and never recalculated; only the status axes, tracking data and
# updated_at change afterwards.
class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(13), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    payment_method = Column(_enum_column(PaymentMethod, "payment_method"), nullable=False)
    payment_status = Column(_enum_column(PaymentStatus, "payment_status"), nullable=False,
                            default=PaymentStatus.PENDING)
    order_status = Column(_enum_column(OrderStatus, "order_status"), nullable=False,
                          default=OrderStatus.PROCESSING, index=True)

    # Money fields, frozen at creation
    subtotal = Column(Numeric(12, 2), nullable=False)
    shipping = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    # Shipping address details
    shipping_first_name = Column(String, nullable=False)
    shipping_last_name = Column(String, nullable=False)
    shipping_email = Column(String, nullable=False)
    shipping_street = Column(String, nullable=False)
    shipping_city = Column(String, nullable=False)
    shipping_state = Column(String, nullable=False)
    shipping_postal_code = Column(String, nullable=False)
    shipping_country = Column(String, nullable=False)

    tracking_number = Column(String, nullable=True)
    estimated_delivery = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan",
                         order_by="OrderItem.id")

    __table_args__ = (
        UniqueConstraint("order_number", name="uq_orders_order_number"),
    )

    @property
    def shipping_address(self):
        return {
            "first_name": self.shipping_first_name,
            "last_name": self.shipping_last_name,
            "email": self.shipping_email,
            "street": self.shipping_street,
            "city": self.shipping_city,
            "state": self.shipping_state,
            "postal_code": self.shipping_postal_code,
            "country": self.shipping_country,
        }


# Snapshot of one purchased product. product_id is deliberately not a
# foreign key: the line must survive later catalog edits or deletions.
class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    image = Column(String, nullable=True)

    order = relationship("Order", back_populates="items")

    @property
    def line_total(self):
        return self.price * self.quantity
