"""
Domain enums shared by ORM models, services and API schemas.
"""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    PAYPAL = "PAYPAL"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"
    UPI = "UPI"
    NET_BANKING = "NET_BANKING"


class RefundStatus(str, Enum):
    APPROVED = "APPROVED"


class CouponType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    CUSTOMER = "CUSTOMER"


class NotificationType(str, Enum):
    NEW_ORDER = "NEW_ORDER"
    ORDER_STATUS = "ORDER_STATUS"
    REFUND = "REFUND"
    LOW_STOCK = "LOW_STOCK"
    SYSTEM = "SYSTEM"


class StockAdjustmentType(str, Enum):
    ADD = "add"
    REMOVE = "remove"
