"""
Dashboard service — revenue and order statistics for a trailing window.

Revenue and order counts exclude CANCELLED orders. Each headline number is
compared with the window of the same length immediately before it.
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db_models import Order, User
from domain.constants import EXCLUDED_FROM_REVENUE, MONEY_QUANTUM, RECENT_ORDERS_LIMIT
from domain.enums import OrderStatus, UserRole
from domain.errors import ValidationError
from models import DashboardStatsResponse, SalesDataPoint
from services import inventory_service, order_service

logger = logging.getLogger(__name__)

_EXCLUDED = [s.value for s in EXCLUDED_FROM_REVENUE]


def calculate_percentage_change(current: Decimal, previous: Decimal) -> float:
    """
    Percent change from previous to current, to two decimal places.

    A zero previous value gives 100.0 when current is positive, else 0.0.
    """
    current = Decimal(str(current))
    previous = Decimal(str(previous))
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    ratio = ((current - previous) / previous).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
    return float(ratio * 100)


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(MONEY_QUANTUM)


async def _revenue_and_orders(db: AsyncSession, start: datetime, end: datetime) -> tuple[Decimal, int]:
    """Revenue and order count for created_at in [start, end)."""
    res = await db.execute(
        select(func.coalesce(func.sum(Order.total), 0), func.count(Order.id)).where(
            Order.created_at >= start,
            Order.created_at < end,
            Order.status.not_in(_EXCLUDED),
        )
    )
    revenue, count = res.one()
    return _money(revenue), count


async def _sales_data(db: AsyncSession, start: datetime, end: datetime) -> list[SalesDataPoint]:
    """One point per calendar day from start's day up to (not including) end."""
    days = []
    cursor = start
    while cursor < end:
        days.append(cursor.date())
        cursor += timedelta(days=1)
    if not days:
        return []

    first = datetime.combine(days[0], datetime.min.time())
    last = datetime.combine(days[-1], datetime.min.time()) + timedelta(days=1)
    res = await db.execute(
        select(Order.created_at, Order.total).where(
            Order.created_at >= first,
            Order.created_at < last,
            Order.status.not_in(_EXCLUDED),
        )
    )

    revenue = {d: Decimal("0") for d in days}
    orders = {d: 0 for d in days}
    for created_at, total in res.all():
        day = created_at.date()
        revenue[day] += Decimal(str(total))
        orders[day] += 1

    return [
        SalesDataPoint(date=d.isoformat(), revenue=_money(revenue[d]), orders=orders[d])
        for d in days
    ]


async def get_dashboard_stats(
    db: AsyncSession,
    *,
    days: int | None = None,
    now: datetime | None = None,
) -> DashboardStatsResponse:
    if days is None:
        days = settings.dashboard_default_days
    if days < 1 or days > settings.dashboard_max_days:
        raise ValidationError(f"days must be between 1 and {settings.dashboard_max_days}", field="days")

    now = now or datetime.utcnow()
    start = now - timedelta(days=days)
    prev_start = start - timedelta(days=days)

    revenue, order_count = await _revenue_and_orders(db, start, now)
    prev_revenue, prev_order_count = await _revenue_and_orders(db, prev_start, start)

    customers = await db.execute(select(func.count(User.id)).where(User.role == UserRole.CUSTOMER.value))
    pending = await db.execute(select(func.count(Order.id)).where(Order.status == OrderStatus.PENDING.value))

    recent_orders, _ = await order_service.list_orders(db, limit=RECENT_ORDERS_LIMIT)
    low_stock = await inventory_service.get_low_stock_products(db)

    logger.info(f"Dashboard stats for last {days} days: revenue={revenue}, orders={order_count}")
    return DashboardStatsResponse(
        total_revenue=revenue,
        total_orders=order_count,
        total_customers=customers.scalar_one(),
        pending_orders=pending.scalar_one(),
        revenue_change=calculate_percentage_change(revenue, prev_revenue),
        orders_change=calculate_percentage_change(Decimal(order_count), Decimal(prev_order_count)),
        sales_data=await _sales_data(db, start, now),
        recent_orders=recent_orders,
        low_stock_products=low_stock,
    )
