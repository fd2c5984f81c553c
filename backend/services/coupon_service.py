"""
Coupon service — coupon CRUD, validation against an order total, and the
discount calculation.
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Coupon
from domain.constants import MAX_PERCENTAGE_VALUE, MONEY_QUANTUM
from domain.enums import CouponType
from domain.errors import ConflictError, NotFoundError, ValidationError
from models import CouponCreateRequest, CouponResponse, CouponValidationResponse

logger = logging.getLogger(__name__)


def calculate_discount(
    *,
    coupon_type: CouponType,
    value: Decimal,
    subtotal: Decimal,
    max_discount: Decimal | None = None,
) -> Decimal:
    """
    Discount a coupon grants on a subtotal.

    PERCENTAGE: subtotal * value / 100, rounded half-up to cents, capped at
    max_discount when one is set. It is not capped at the subtotal.
    FIXED: value, capped at the subtotal.
    """
    value = Decimal(str(value))
    subtotal = Decimal(str(subtotal))

    if CouponType(coupon_type) == CouponType.PERCENTAGE:
        discount = (subtotal * value / Decimal(100)).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
        if max_discount is not None:
            discount = min(discount, Decimal(str(max_discount)))
        return discount

    return min(value, subtotal)


def to_coupon_response(coupon: Coupon) -> CouponResponse:
    return CouponResponse(
        id=coupon.id,
        code=coupon.code,
        type=coupon.type,
        value=coupon.value,
        min_purchase=coupon.min_purchase,
        max_discount=coupon.max_discount,
        usage_limit=coupon.usage_limit,
        usage_count=coupon.usage_count,
        expires_at=coupon.expires_at,
        is_active=coupon.is_active,
        is_expired=coupon.expires_at < datetime.utcnow(),
        created_at=coupon.created_at,
    )


def _check_percentage(request: CouponCreateRequest) -> None:
    if request.type == CouponType.PERCENTAGE and request.value > MAX_PERCENTAGE_VALUE:
        raise ValidationError("Percentage discount cannot exceed 100%", field="value")


async def _code_taken(db: AsyncSession, code: str) -> bool:
    res = await db.execute(select(Coupon.id).where(Coupon.code == code.upper()))
    return res.scalar_one_or_none() is not None


async def list_coupons(db: AsyncSession) -> list[Coupon]:
    res = await db.execute(select(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc()))
    coupons = res.scalars().all()
    logger.info(f"Retrieved {len(coupons)} coupons")
    return coupons


async def get_coupon(db: AsyncSession, *, coupon_id: int) -> Coupon:
    coupon = await db.get(Coupon, coupon_id)
    if not coupon:
        raise NotFoundError("Coupon", str(coupon_id))
    return coupon


async def create_coupon(db: AsyncSession, *, request: CouponCreateRequest) -> Coupon:
    if await _code_taken(db, request.code):
        raise ValidationError(f"Coupon with code {request.code.upper()} already exists")
    _check_percentage(request)

    coupon = Coupon(
        code=request.code.upper(),
        type=request.type.value,
        value=request.value,
        min_purchase=request.min_purchase if request.min_purchase is not None else Decimal("0"),
        max_discount=request.max_discount,
        usage_limit=request.usage_limit,
        usage_count=0,
        expires_at=request.expires_at,
        is_active=request.is_active if request.is_active is not None else True,
    )
    db.add(coupon)
    try:
        await db.flush()
    except IntegrityError:
        # Race: another request created the same code first
        raise ConflictError(f"Coupon with code {coupon.code} already exists")

    logger.info(f"Created new coupon: {coupon.code} of type {coupon.type}")
    return coupon


async def update_coupon(db: AsyncSession, *, coupon_id: int, request: CouponCreateRequest) -> Coupon:
    """Replace every editable field of a coupon. usage_count is preserved."""
    coupon = await get_coupon(db, coupon_id=coupon_id)

    new_code = request.code.upper()
    if coupon.code != new_code and await _code_taken(db, new_code):
        raise ValidationError(f"Coupon with code {new_code} already exists")
    _check_percentage(request)

    coupon.code = new_code
    coupon.type = request.type.value
    coupon.value = request.value
    coupon.min_purchase = request.min_purchase if request.min_purchase is not None else Decimal("0")
    coupon.max_discount = request.max_discount
    coupon.usage_limit = request.usage_limit
    coupon.expires_at = request.expires_at
    coupon.is_active = request.is_active if request.is_active is not None else True
    coupon.updated_at = datetime.utcnow()
    try:
        await db.flush()
    except IntegrityError:
        raise ConflictError(f"Coupon with code {new_code} already exists")

    logger.info(f"Updated coupon: {coupon.code}")
    return coupon


async def deactivate_coupon(db: AsyncSession, *, coupon_id: int) -> Coupon:
    """Soft-delete: coupons are deactivated, never removed."""
    coupon = await get_coupon(db, coupon_id=coupon_id)
    coupon.is_active = False
    coupon.updated_at = datetime.utcnow()
    await db.flush()

    logger.info(f"Deactivated coupon: {coupon.code}")
    return coupon


async def validate_coupon(db: AsyncSession, *, code: str, order_total: Decimal) -> CouponValidationResponse:
    """
    Check that a coupon can be applied to an order total and compute its discount.

    Does not consume a use; usage_count is incremented at checkout.
    """
    res = await db.execute(select(Coupon).where(Coupon.code == code.strip().upper()))
    coupon = res.scalar_one_or_none()
    if not coupon:
        raise NotFoundError("Coupon", code)

    order_total = Decimal(str(order_total))

    if not coupon.is_active:
        raise ValidationError("Coupon is not active")
    if coupon.expires_at < datetime.utcnow():
        raise ValidationError("Coupon has expired")
    if coupon.usage_count >= coupon.usage_limit:
        raise ValidationError("Coupon usage limit reached")
    if order_total < coupon.min_purchase:
        raise ValidationError(
            f"Order total must be at least {coupon.min_purchase} to use this coupon"
        )

    discount = calculate_discount(
        coupon_type=coupon.type,
        value=coupon.value,
        subtotal=order_total,
        max_discount=coupon.max_discount,
    )
    logger.info(f"Validated coupon: {coupon.code}, discount: {discount}")

    return CouponValidationResponse(
        valid=True,
        discount_amount=discount,
        coupon_code=coupon.code,
        message="Coupon applied successfully",
    )
