"""
Admin coupon endpoints — CRUD (soft delete) and validation against an order total.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import require_admin
from domain.responses import success_response
from models import CouponCreateRequest, CouponValidateRequest
from services import coupon_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/coupons", tags=["coupons"])


@router.get("")
async def list_coupons(
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    coupons = await coupon_service.list_coupons(db)
    return success_response(
        data=[coupon_service.to_coupon_response(c) for c in coupons],
        meta={"total": len(coupons)},
    )


@router.post("/validate")
async def validate_coupon(
    request: CouponValidateRequest,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await coupon_service.validate_coupon(db, code=request.code, order_total=request.order_total)
    return success_response(data=result)


@router.get("/{coupon_id}")
async def get_coupon(
    coupon_id: int,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    coupon = await coupon_service.get_coupon(db, coupon_id=coupon_id)
    return success_response(data=coupon_service.to_coupon_response(coupon))


@router.post("", status_code=201)
async def create_coupon(
    request: CouponCreateRequest,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    coupon = await coupon_service.create_coupon(db, request=request)
    await db.commit()
    await db.refresh(coupon)
    logger.info(f"Coupon {coupon.code} created by admin {admin_id}")
    return success_response(data=coupon_service.to_coupon_response(coupon))


@router.put("/{coupon_id}")
async def update_coupon(
    coupon_id: int,
    request: CouponCreateRequest,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    coupon = await coupon_service.update_coupon(db, coupon_id=coupon_id, request=request)
    await db.commit()
    await db.refresh(coupon)
    return success_response(data=coupon_service.to_coupon_response(coupon))


@router.delete("/{coupon_id}")
async def delete_coupon(
    coupon_id: int,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    coupon = await coupon_service.deactivate_coupon(db, coupon_id=coupon_id)
    await db.commit()
    return success_response(
        data={
            "id": coupon.id,
            "code": coupon.code,
            "message": f"Coupon '{coupon.code}' deactivated (isActive=False)",
        }
    )
