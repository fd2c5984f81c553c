"""
Inventory service — stock listing, low-stock report and stock adjustments.
"""

import logging
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import unit_of_work
from db_models import Product
from domain.enums import StockAdjustmentType
from domain.errors import NotFoundError, ValidationError
from models import ProductResponse

logger = logging.getLogger(__name__)


def to_product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        sku=product.sku,
        description=product.description,
        price=product.price,
        stock_quantity=product.stock_quantity,
        in_stock=product.stock_quantity > 0,
        thumbnail=product.thumbnail,
        is_active=product.is_active,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


async def get_product(db: AsyncSession, *, product_id: int) -> Product:
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product", str(product_id))
    return product


async def list_inventory(
    db: AsyncSession,
    *,
    search: str | None = None,
    in_stock: bool | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[ProductResponse], int]:
    """
    Stock list, newest products first.

    search matches name, SKU or description (case-insensitive substring);
    in_stock filters on stock_quantity > 0. Returns (page, total_matching).
    """
    filters = []
    if search:
        pattern = f"%{search.strip().lower()}%"
        filters.append(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.sku).like(pattern),
                func.lower(Product.description).like(pattern),
            )
        )
    if in_stock is not None:
        filters.append(Product.stock_quantity > 0 if in_stock else Product.stock_quantity <= 0)

    count_res = await db.execute(select(func.count(Product.id)).where(*filters))
    total = count_res.scalar_one()

    res = await db.execute(
        select(Product)
        .where(*filters)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(limit)
        .offset(offset)
    )
    products = res.scalars().all()

    logger.info(f"Retrieved {total} products with search={search}, in_stock={in_stock}")
    return [to_product_response(p) for p in products], total


async def get_low_stock_products(db: AsyncSession, *, threshold: int | None = None) -> list[ProductResponse]:
    """Products with stock strictly below the threshold, lowest stock first."""
    if threshold is None:
        threshold = settings.low_stock_threshold

    res = await db.execute(
        select(Product)
        .where(Product.stock_quantity < threshold)
        .order_by(Product.stock_quantity.asc(), Product.id.asc())
    )
    products = res.scalars().all()

    logger.info(f"Found {len(products)} low stock products (stock < {threshold})")
    return [to_product_response(p) for p in products]


async def adjust_stock(
    db: AsyncSession,
    *,
    product_id: int,
    quantity: int,
    adjustment_type: StockAdjustmentType,
    admin_id: int,
) -> ProductResponse:
    """Add or remove units in its own transaction. Stock never goes below zero."""
    adjustment_type = StockAdjustmentType(adjustment_type)
    if quantity <= 0:
        raise ValidationError("Quantity must be positive", field="quantity")

    async with unit_of_work(db):
        product = await get_product(db, product_id=product_id)
        current = product.stock_quantity

        if adjustment_type == StockAdjustmentType.ADD:
            new_stock = current + quantity
        else:
            new_stock = current - quantity
            if new_stock < 0:
                raise ValidationError(
                    f"Cannot remove more stock than available. Current stock: {current}",
                    details={"current_stock": current, "requested": quantity},
                )

        product.stock_quantity = new_stock
        product.updated_at = datetime.utcnow()
        await db.flush()
        response = to_product_response(product)

    logger.info(
        f"Stock for product {product.sku} changed {current} -> {new_stock} "
        f"({adjustment_type.value} {quantity}) by admin {admin_id}"
    )
    return response
