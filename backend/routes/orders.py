"""
Admin order endpoints — list, detail, status changes, refunds, timeline.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import Pagination, pagination_params, require_admin
from domain.enums import OrderStatus
from domain.responses import paginated_response, success_response
from models import OrderStatusUpdateRequest, RefundRequest
from services import order_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/orders", tags=["orders"])


@router.get("")
async def list_orders(
    status: Optional[OrderStatus] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    page: Pagination = Depends(pagination_params),
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    logger.info(
        f"Fetching orders with status={status}, search={search}, "
        f"limit={page['limit']}, offset={page['offset']}"
    )
    orders, total = await order_service.list_orders(
        db,
        status=status,
        search=search,
        limit=page["limit"],
        offset=page["offset"],
    )
    return paginated_response(orders, limit=page["limit"], offset=page["offset"], total=total)


@router.get("/{order_id}")
async def get_order_details(
    order_id: int,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    detail = await order_service.get_order_details(db, order_id=order_id)
    return success_response(data=detail)


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: int,
    request: OrderStatusUpdateRequest,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    logger.info(f"Updating order {order_id} status to {request.status.value} by admin {admin_id}")
    order = await order_service.update_order_status(
        db,
        order_id=order_id,
        target_status=request.status,
        notes=request.notes,
        admin_id=admin_id,
    )
    return success_response(data=order)


@router.post("/{order_id}/refund")
async def process_refund(
    order_id: int,
    request: RefundRequest,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    logger.info(f"Processing refund for order {order_id} by admin {admin_id}")
    await order_service.process_refund(
        db,
        order_id=order_id,
        refund_amount=request.refund_amount,
        reason=request.reason,
        admin_id=admin_id,
    )
    return success_response(data={"orderId": order_id, "message": "Refund processed successfully"})


@router.get("/{order_id}/timeline")
async def get_order_timeline(
    order_id: int,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    timeline = await order_service.get_order_timeline(db, order_id=order_id)
    return success_response(data=timeline, meta={"total": len(timeline)})
