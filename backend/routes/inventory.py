"""
Admin inventory endpoints — stock list, low-stock report, stock adjustments.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import Pagination, pagination_params, require_admin
from domain.responses import paginated_response, success_response
from models import StockAdjustmentRequest
from services import inventory_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/inventory", tags=["inventory"])


@router.get("")
async def get_inventory(
    search: Optional[str] = Query(None, max_length=100),
    in_stock: Optional[bool] = Query(None, alias="inStock"),
    page: Pagination = Depends(pagination_params),
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    products, total = await inventory_service.list_inventory(
        db,
        search=search,
        in_stock=in_stock,
        limit=page["limit"],
        offset=page["offset"],
    )
    return paginated_response(products, limit=page["limit"], offset=page["offset"], total=total)


@router.get("/low-stock")
async def get_low_stock_products(
    threshold: Optional[int] = Query(None, ge=1),
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    products = await inventory_service.get_low_stock_products(db, threshold=threshold)
    return success_response(data=products, meta={"total": len(products)})


@router.put("/{product_id}/stock")
async def adjust_stock(
    product_id: int,
    request: StockAdjustmentRequest,
    admin_id: int = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    logger.info(
        f"Adjusting stock for product {product_id}: type={request.type.value}, "
        f"quantity={request.quantity} by admin {admin_id}"
    )
    product = await inventory_service.adjust_stock(
        db,
        product_id=product_id,
        quantity=request.quantity,
        adjustment_type=request.type,
        admin_id=admin_id,
    )
    return success_response(data=product)
