"""
Order service — admin order queries, the status machine, and refunds.

Status machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    PENDING / PROCESSING → CANCELLED
    SHIPPED / DELIVERED  → REFUNDED (refund workflow only)
    CANCELLED and REFUNDED are terminal.

Every successful status change appends exactly one OrderStatusHistory row
inside the same transaction as the order update. The acting admin id is
always passed in explicitly by the caller.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from database import unit_of_work
from db_models import Order, OrderItem, OrderRefund, OrderStatusHistory, User
from domain.constants import (
    MONEY_QUANTUM,
    NON_CANCELLABLE_STATUSES,
    REFUND_NOTE_PREFIX,
    REFUNDABLE_STATUSES,
    TERMINAL_STATUSES,
)
from domain.enums import OrderStatus, RefundStatus
from domain.errors import (
    DuplicateRefundError,
    InvalidAmountError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
)
from models import (
    AddressResponse,
    CustomerResponse,
    OrderDetailResponse,
    OrderItemResponse,
    OrderResponse,
    OrderTimelineEntry,
)

logger = logging.getLogger(__name__)


# ── Status machine ──────────────────────────────────────────────────

def validate_status_transition(old_status: OrderStatus, new_status: OrderStatus) -> None:
    """
    Raise InvalidTransitionError unless old_status → new_status is allowed.

    Checks run in a fixed order: no-op, terminal source, cancel after shipping.
    """
    old_status = OrderStatus(old_status)
    new_status = OrderStatus(new_status)

    if old_status == new_status:
        raise InvalidTransitionError(
            old_status.value, new_status.value,
            f"Order is already in {new_status.value} status",
        )

    if old_status in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            old_status.value, new_status.value,
            "Cannot update status of cancelled or refunded orders",
        )

    if new_status == OrderStatus.CANCELLED and old_status in NON_CANCELLABLE_STATUSES:
        raise InvalidTransitionError(
            old_status.value, new_status.value,
            "Cannot cancel shipped or delivered orders",
        )


def _append_history(
    db: AsyncSession,
    *,
    order_id: int,
    old_status: OrderStatus | None,
    new_status: OrderStatus,
    admin_id: int,
    notes: str | None,
) -> OrderStatusHistory:
    record = OrderStatusHistory(
        order_id=order_id,
        old_status=old_status.value if old_status is not None else None,
        new_status=new_status.value,
        changed_by=admin_id,
        notes=notes,
        created_at=datetime.utcnow(),
    )
    db.add(record)
    return record


async def transition(
    db: AsyncSession,
    order: Order,
    *,
    target_status: OrderStatus,
    admin_id: int,
    notes: str | None = None,
) -> Order:
    """
    Apply one status change to a loaded order and record it in the audit trail.

    Flushes but does not commit; callers wrap this in unit_of_work().
    """
    old_status = OrderStatus(order.status)
    new_status = OrderStatus(target_status)

    try:
        validate_status_transition(old_status, new_status)
    except InvalidTransitionError as e:
        logger.warning(
            f"Rejected transition for order {order.order_number}: "
            f"{old_status.value} -> {new_status.value} by admin {admin_id} ({e.message})"
        )
        raise

    order.status = new_status.value
    if new_status == OrderStatus.DELIVERED:
        order.delivered_date = datetime.utcnow()

    _append_history(
        db,
        order_id=order.id,
        old_status=old_status,
        new_status=new_status,
        admin_id=admin_id,
        notes=notes,
    )
    await db.flush()

    logger.info(
        f"Order {order.order_number} status updated from {old_status.value} "
        f"to {new_status.value} by admin {admin_id}"
    )
    return order


# ── Refund workflow ─────────────────────────────────────────────────

def _to_money(amount) -> Decimal:
    """Exact Decimal for a money amount; more than two decimal places is an error."""
    value = Decimal(str(amount))
    if value != value.quantize(MONEY_QUANTUM):
        raise InvalidAmountError(
            "Refund amount cannot have more than 2 decimal places",
            details={"refund_amount": str(value)},
        )
    return value.quantize(MONEY_QUANTUM)


async def find_refund(db: AsyncSession, *, order_id: int) -> OrderRefund | None:
    res = await db.execute(select(OrderRefund).where(OrderRefund.order_id == order_id))
    return res.scalar_one_or_none()


async def refund(
    db: AsyncSession,
    order: Order,
    *,
    refund_amount: Decimal,
    reason: str,
    admin_id: int,
) -> OrderRefund:
    """
    Record a refund for a loaded order and force it into REFUNDED.

    The history row keeps the status the order had before the refund.
    Flushes but does not commit; callers wrap this in unit_of_work().
    """
    if await find_refund(db, order_id=order.id) is not None:
        logger.warning(f"Duplicate refund rejected for order {order.order_number} (admin {admin_id})")
        raise DuplicateRefundError(order.id)

    previous_status = OrderStatus(order.status)
    if previous_status not in REFUNDABLE_STATUSES:
        raise InvalidStateError(
            "Can only refund delivered or shipped orders",
            current_status=previous_status.value,
        )

    amount = _to_money(refund_amount)
    if amount <= 0:
        raise InvalidAmountError(
            "Refund amount must be greater than zero",
            details={"refund_amount": str(amount)},
        )

    if amount > order.total:
        raise InvalidAmountError(
            "Refund amount cannot exceed order total",
            details={"refund_amount": str(amount), "order_total": str(order.total)},
        )

    record = OrderRefund(
        order_id=order.id,
        refund_amount=amount,
        reason=reason,
        status=RefundStatus.APPROVED.value,
        processed_by=admin_id,
    )
    db.add(record)

    order.status = OrderStatus.REFUNDED.value

    _append_history(
        db,
        order_id=order.id,
        old_status=previous_status,
        new_status=OrderStatus.REFUNDED,
        admin_id=admin_id,
        notes=f"{REFUND_NOTE_PREFIX}{reason}",
    )
    try:
        await db.flush()
    except IntegrityError:
        # Another refund for this order was written after find_refund ran
        logger.warning(f"Concurrent refund rejected for order {order.order_number} (admin {admin_id})")
        raise DuplicateRefundError(order.id)

    logger.info(
        f"Refund processed for order {order.order_number} by admin {admin_id}, amount: {amount}"
    )
    return record


# ── Loading & mapping ───────────────────────────────────────────────

async def get_order(db: AsyncSession, *, order_id: int) -> Order:
    """Load an order with customer, shipping address and lines in one round trip set."""
    res = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .options(
            selectinload(Order.user),
            selectinload(Order.shipping_address),
            selectinload(Order.items).selectinload(OrderItem.product),
        )
        .execution_options(populate_existing=True)
    )
    order = res.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order", str(order_id))
    return order


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        payment_method=order.payment_method,
        customer_name=order.user.full_name if order.user else None,
        customer_email=order.user.email if order.user else None,
        subtotal=order.subtotal,
        shipping=order.shipping,
        discount=order.discount,
        total=order.total,
        item_count=len(order.items or []),
        order_date=order.order_date,
        delivered_date=order.delivered_date,
        created_at=order.created_at,
    )


def to_order_detail_response(order: Order) -> OrderDetailResponse:
    return OrderDetailResponse(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        payment_method=order.payment_method,
        customer=CustomerResponse.model_validate(order.user),
        shipping_address=AddressResponse.model_validate(order.shipping_address),
        items=[
            OrderItemResponse(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name,
                thumbnail=item.product.thumbnail,
                quantity=item.quantity,
                price=item.price,
                discount=item.discount,
                total=item.total,
                size=item.size,
                color=item.color,
            )
            for item in order.items
        ],
        subtotal=order.subtotal,
        shipping=order.shipping,
        discount=order.discount,
        total=order.total,
        coupon_code=order.coupon_code,
        notes=order.notes,
        order_date=order.order_date,
        delivered_date=order.delivered_date,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


# ── Public operations ───────────────────────────────────────────────

async def update_order_status(
    db: AsyncSession,
    *,
    order_id: int,
    target_status: OrderStatus,
    notes: str | None,
    admin_id: int,
) -> OrderResponse:
    """Transition an order in its own transaction and return the updated summary."""
    async with unit_of_work(db):
        order = await get_order(db, order_id=order_id)
        await transition(db, order, target_status=target_status, admin_id=admin_id, notes=notes)
        response = to_order_response(order)
    return response


async def process_refund(
    db: AsyncSession,
    *,
    order_id: int,
    refund_amount: Decimal,
    reason: str,
    admin_id: int,
) -> None:
    """Refund an order in its own transaction."""
    async with unit_of_work(db):
        order = await get_order(db, order_id=order_id)
        await refund(db, order, refund_amount=refund_amount, reason=reason, admin_id=admin_id)


async def get_order_timeline(db: AsyncSession, *, order_id: int) -> list[OrderTimelineEntry]:
    """Audit trail for one order, oldest first."""
    exists = await db.execute(select(Order.id).where(Order.id == order_id))
    if exists.scalar_one_or_none() is None:
        raise NotFoundError("Order", str(order_id))

    res = await db.execute(
        select(OrderStatusHistory)
        .where(OrderStatusHistory.order_id == order_id)
        .order_by(OrderStatusHistory.created_at.asc(), OrderStatusHistory.id.asc())
    )
    entries = [OrderTimelineEntry.model_validate(r) for r in res.scalars().all()]
    logger.info(f"Retrieved timeline for order id: {order_id}, {len(entries)} entries")
    return entries


async def get_order_details(db: AsyncSession, *, order_id: int) -> OrderDetailResponse:
    order = await get_order(db, order_id=order_id)
    logger.info(f"Retrieved order details for order: {order.order_number}")
    return to_order_detail_response(order)


async def list_orders(
    db: AsyncSession,
    *,
    status: OrderStatus | None = None,
    search: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[OrderResponse], int]:
    """
    Admin order list, newest first.

    search matches order number, customer name or customer email
    (case-insensitive substring). Returns (page, total_matching).
    """
    filters = []
    if status is not None:
        filters.append(Order.status == OrderStatus(status).value)
    if search:
        pattern = f"%{search.strip().lower()}%"
        filters.append(
            or_(
                func.lower(Order.order_number).like(pattern),
                func.lower(User.full_name).like(pattern),
                func.lower(User.email).like(pattern),
            )
        )

    count_res = await db.execute(
        select(func.count(Order.id)).join(User, Order.user_id == User.id).where(*filters)
    )
    total = count_res.scalar_one()

    res = await db.execute(
        select(Order)
        .join(User, Order.user_id == User.id)
        .where(*filters)
        .options(selectinload(Order.user), selectinload(Order.items))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .offset(offset)
    )
    orders = res.scalars().all()

    logger.info(f"Retrieved {total} orders with status={status}, search={search}")
    return [to_order_response(o) for o in orders], total
