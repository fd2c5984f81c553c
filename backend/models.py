"""
Pydantic models for request/response validation.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.enums import CouponType, NotificationType, OrderStatus, PaymentMethod, StockAdjustmentType


class AdminBase(BaseModel):
    """Shared base — allows construction by Python name or camelCase alias."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ── Order Requests ──────────────────────────────────────────────────

class OrderStatusUpdateRequest(AdminBase):
    """Move an order to another status."""
    status: OrderStatus = Field(..., description="Target order status")
    notes: Optional[str] = Field(default=None, max_length=500)


class RefundRequest(AdminBase):
    """Refund a shipped or delivered order."""
    refund_amount: Decimal = Field(
        ...,
        alias="refundAmount",
        gt=0,
        max_digits=10,
        decimal_places=2,
        description="Amount to refund; must not exceed the order total",
    )
    reason: str = Field(..., min_length=1, max_length=500)


# ── Order Responses ─────────────────────────────────────────────────

class OrderResponse(AdminBase):
    """Order summary used by lists and returned after a status change."""
    id: int
    order_number: str = Field(..., alias="orderNumber")
    status: OrderStatus
    payment_method: PaymentMethod = Field(..., alias="paymentMethod")
    customer_name: Optional[str] = Field(None, alias="customerName")
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    subtotal: Decimal
    shipping: Decimal
    discount: Decimal
    total: Decimal
    item_count: int = Field(0, alias="itemCount")
    order_date: Optional[datetime] = Field(None, alias="orderDate")
    delivered_date: Optional[datetime] = Field(None, alias="deliveredDate")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class CustomerResponse(AdminBase):
    id: int
    full_name: str = Field(..., alias="fullName")
    email: str
    mobile: Optional[str] = None
    role: str
    is_active: bool = Field(..., alias="isActive")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class AddressResponse(AdminBase):
    id: int
    full_name: str = Field(..., alias="fullName")
    mobile: str
    address_line1: str = Field(..., alias="addressLine1")
    address_line2: Optional[str] = Field(None, alias="addressLine2")
    city: str
    state: str
    pincode: str
    country: str


class OrderItemResponse(AdminBase):
    id: int
    product_id: int = Field(..., alias="productId")
    product_name: str = Field(..., alias="productName")
    thumbnail: Optional[str] = None
    quantity: int
    price: Decimal
    discount: Decimal
    total: Decimal
    size: Optional[str] = None
    color: Optional[str] = None


class OrderDetailResponse(AdminBase):
    """Full order aggregate: customer, shipping address and lines."""
    id: int
    order_number: str = Field(..., alias="orderNumber")
    status: OrderStatus
    payment_method: PaymentMethod = Field(..., alias="paymentMethod")
    customer: CustomerResponse
    shipping_address: AddressResponse = Field(..., alias="shippingAddress")
    items: List[OrderItemResponse] = Field(default_factory=list)
    subtotal: Decimal
    shipping: Decimal
    discount: Decimal
    total: Decimal
    coupon_code: Optional[str] = Field(None, alias="couponCode")
    notes: Optional[str] = None
    order_date: Optional[datetime] = Field(None, alias="orderDate")
    delivered_date: Optional[datetime] = Field(None, alias="deliveredDate")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class OrderTimelineEntry(AdminBase):
    """One audit-trail row."""
    id: int
    order_id: int = Field(..., alias="orderId")
    old_status: Optional[OrderStatus] = Field(None, alias="oldStatus")
    new_status: OrderStatus = Field(..., alias="newStatus")
    changed_by: int = Field(..., alias="changedBy")
    notes: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")


# ── Coupon Models ───────────────────────────────────────────────────

class CouponCreateRequest(AdminBase):
    """Create or replace a coupon."""
    code: str = Field(..., min_length=1, max_length=50)
    type: CouponType
    value: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    min_purchase: Optional[Decimal] = Field(None, alias="minPurchase", ge=0)
    max_discount: Optional[Decimal] = Field(None, alias="maxDiscount", gt=0)
    usage_limit: int = Field(..., alias="usageLimit", gt=0)
    expires_at: datetime = Field(..., alias="expiresAt")
    is_active: Optional[bool] = Field(True, alias="isActive")

    @field_validator("code")
    @classmethod
    def code_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Coupon code is required")
        return v.strip()

    @field_validator("expires_at")
    @classmethod
    def expires_at_naive_utc(cls, v: datetime) -> datetime:
        # Stored in a naive DateTime column and compared with utcnow()
        if v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class CouponResponse(AdminBase):
    id: int
    code: str
    type: CouponType
    value: Decimal
    min_purchase: Decimal = Field(..., alias="minPurchase")
    max_discount: Optional[Decimal] = Field(None, alias="maxDiscount")
    usage_limit: int = Field(..., alias="usageLimit")
    usage_count: int = Field(..., alias="usageCount")
    expires_at: datetime = Field(..., alias="expiresAt")
    is_active: bool = Field(..., alias="isActive")
    is_expired: bool = Field(..., alias="isExpired")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class CouponValidateRequest(AdminBase):
    code: str = Field(..., min_length=1, max_length=50)
    order_total: Decimal = Field(..., alias="orderTotal", ge=0)


class CouponValidationResponse(AdminBase):
    valid: bool
    discount_amount: Decimal = Field(..., alias="discountAmount")
    coupon_code: str = Field(..., alias="couponCode")
    message: str


# ── Inventory Models ────────────────────────────────────────────────

class ProductResponse(AdminBase):
    id: int
    name: str
    sku: str
    description: Optional[str] = None
    price: Decimal
    stock_quantity: int = Field(..., alias="stockQuantity")
    in_stock: bool = Field(..., alias="inStock")
    thumbnail: Optional[str] = None
    is_active: bool = Field(..., alias="isActive")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class StockAdjustmentRequest(AdminBase):
    """Add or remove units of a product."""
    quantity: int = Field(..., gt=0)
    type: StockAdjustmentType

    @field_validator("type", mode="before")
    @classmethod
    def type_lowercase(cls, v):
        return v.lower() if isinstance(v, str) else v


# ── Notification Models ─────────────────────────────────────────────

class NotificationResponse(AdminBase):
    id: int
    type: NotificationType
    title: str
    message: str
    reference_id: Optional[int] = Field(None, alias="referenceId")
    reference_type: Optional[str] = Field(None, alias="referenceType")
    is_read: bool = Field(..., alias="isRead")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    read_at: Optional[datetime] = Field(None, alias="readAt")


# ── Dashboard Models ────────────────────────────────────────────────

class SalesDataPoint(AdminBase):
    date: str
    revenue: Decimal
    orders: int


class DashboardStatsResponse(AdminBase):
    """Headline numbers for a trailing window compared with the window before it."""
    total_revenue: Decimal = Field(..., alias="totalRevenue")
    total_orders: int = Field(..., alias="totalOrders")
    total_customers: int = Field(..., alias="totalCustomers")
    pending_orders: int = Field(..., alias="pendingOrders")
    revenue_change: float = Field(..., alias="revenueChange")
    orders_change: float = Field(..., alias="ordersChange")
    sales_data: List[SalesDataPoint] = Field(default_factory=list, alias="salesData")
    recent_orders: List[OrderResponse] = Field(default_factory=list, alias="recentOrders")
    low_stock_products: List[ProductResponse] = Field(default_factory=list, alias="lowStockProducts")
