"""
SQLAlchemy ORM models for the Storefront Admin API.

Tables:
    users                — customers and administrators
    addresses            — customer shipping addresses
    products             — catalogue entries referenced by order lines
    orders               — order aggregate root (status driven by the lifecycle service)
    order_items          — order lines
    order_status_history — append-only audit trail of status changes
    order_refunds        — at most one refund per order
    coupons              — discount codes
    notifications        — per-admin inbox
"""
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Numeric, Boolean, DateTime, Text, ForeignKey,
    UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship

from database import Base
from domain.enums import CouponType, OrderStatus, RefundStatus, UserRole

# Numeric(10, 2) returned as Decimal
Money = Numeric(10, 2, asdecimal=True)


class User(Base):
    """Customers place orders; admins change them."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=False, index=True)
    mobile = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.CUSTOMER.value)  # "ADMIN" | "CUSTOMER"
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    orders = relationship("Order", back_populates="user", lazy="select")
    addresses = relationship("Address", back_populates="user", lazy="select")


class Address(Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    full_name = Column(String(100), nullable=False)
    mobile = Column(String(20), nullable=False)
    address_line1 = Column(String(200), nullable=False)
    address_line2 = Column(String(200), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    pincode = Column(String(10), nullable=False)
    country = Column(String(50), nullable=False, default="India")
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="addresses")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    sku = Column(String(64), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Money, nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    thumbnail = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Order(Base):
    """
    Order aggregate root.

    Created at checkout (outside this service). After that, `status` is only
    changed by services.order_service (status transitions and refunds), and
    the row is never deleted.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    order_number = Column(String(50), unique=True, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    payment_method = Column(String(30), nullable=False)
    shipping_address_id = Column(Integer, ForeignKey("addresses.id"), nullable=False)

    subtotal = Column(Money, nullable=False)
    shipping = Column(Money, nullable=False)
    discount = Column(Money, nullable=False, default=0)
    total = Column(Money, nullable=False)

    coupon_code = Column(String(50), nullable=True)
    notes = Column(String(1000), nullable=True)
    order_date = Column(DateTime, default=datetime.utcnow)
    delivered_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="orders")
    shipping_address = relationship("Address")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    __table_args__ = (
        # Admin order list: filter by status, newest first
        Index("ix_orders_status_created", "status", "created_at"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Money, nullable=False)
    discount = Column(Money, nullable=False, default=0)
    total = Column(Money, nullable=False)
    size = Column(String(20), nullable=True)
    color = Column(String(30), nullable=True)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")


class OrderStatusHistory(Base):
    """
    Append-only audit record, one row per status change.

    old_status is NULL only for a record describing the order's first status.
    Rows are written exclusively by services.order_service.
    """
    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    old_status = Column(String(20), nullable=True)
    new_status = Column(String(20), nullable=False)
    changed_by = Column(Integer, nullable=False)  # acting admin user id
    notes = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_order_status_history_order_created", "order_id", "created_at"),
    )


class OrderRefund(Base):
    """At most one refund per order; status is always APPROVED for now."""
    __tablename__ = "order_refunds"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    refund_amount = Column(Money, nullable=False)
    reason = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=RefundStatus.APPROVED.value)
    processed_by = Column(Integer, nullable=False)  # acting admin user id
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("order_id", name="uq_order_refund_order_id"),
    )


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(50), unique=True, nullable=False, index=True)  # stored upper-case
    type = Column(String(20), nullable=False, default=CouponType.PERCENTAGE.value)  # PERCENTAGE | FIXED
    value = Column(Money, nullable=False)
    min_purchase = Column(Money, nullable=False, default=0)
    max_discount = Column(Money, nullable=True)  # only caps PERCENTAGE coupons
    usage_limit = Column(Integer, nullable=False)
    usage_count = Column(Integer, nullable=False, default=0)
    expires_at = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Notification(Base):
    """Admin inbox entry. reference_type/reference_id point at the related row (e.g. ORDER, 42)."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(String(30), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    reference_id = Column(Integer, nullable=True)
    reference_type = Column(String(50), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    read_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "is_read"),
    )
