"""
Pytest configuration and shared fixtures for the Storefront Admin API tests.

Provides an in-memory SQLite session, seeded customers/admins/products,
an order factory, and an HTTP client wired to the test session.
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

# Never touch the on-disk database from tests
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

from datetime import datetime, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings
from database import Base, get_db
from domain.enums import OrderStatus, PaymentMethod, UserRole

# ── Test Configuration ───────────────────────────────────────────────
# Set test-only values for settings that would normally come from .env
if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"


# ── Database Fixtures ────────────────────────────────────────────────


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
    import db_models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client bound to the ASGI app with the test DB session.

    Overrides get_db so routes and dependencies share db_session.
    """
    from main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


# ── Test Data Fixtures ────────────────────────────────────────────────


@pytest_asyncio.fixture
async def sample_admin(db_session: AsyncSession):
    """Active administrator."""
    from db_models import User

    admin = User(full_name="Asha Admin", email="admin@storefront.test", role=UserRole.ADMIN.value)
    db_session.add(admin)
    await db_session.commit()
    await db_session.refresh(admin)
    return admin


@pytest_asyncio.fixture
async def sample_customer(db_session: AsyncSession):
    """Customer who places the orders."""
    from db_models import User

    customer = User(
        full_name="Ravi Kumar",
        email="ravi.kumar@example.com",
        mobile="9876543210",
        role=UserRole.CUSTOMER.value,
    )
    db_session.add(customer)
    await db_session.commit()
    await db_session.refresh(customer)
    return customer


@pytest_asyncio.fixture
async def sample_address(db_session: AsyncSession, sample_customer):
    from db_models import Address

    address = Address(
        user_id=sample_customer.id,
        full_name="Ravi Kumar",
        mobile="9876543210",
        address_line1="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        pincode="560001",
    )
    db_session.add(address)
    await db_session.commit()
    await db_session.refresh(address)
    return address


@pytest_asyncio.fixture
async def sample_product(db_session: AsyncSession):
    from db_models import Product

    product = Product(
        name="Cotton Kurta",
        sku="KURTA-BLU-M",
        price=Decimal("100.00"),
        stock_quantity=25,
        thumbnail="https://cdn.example.com/kurta.jpg",
    )
    db_session.add(product)
    await db_session.commit()
    await db_session.refresh(product)
    return product


@pytest_asyncio.fixture
async def make_order(db_session: AsyncSession, sample_customer, sample_address, sample_product):
    """
    Factory for persisted orders.

    Usage: order = await make_order(status=OrderStatus.DELIVERED, total="200.00")
    """
    from db_models import Order, OrderItem

    # Ids captured up front; fixture objects expire after a rolled-back test step
    customer_id = sample_customer.id
    address_id = sample_address.id
    product_id = sample_product.id
    counter = {"n": 0}

    async def _make(status=OrderStatus.PENDING, total="200.00", quantity=2, **overrides):
        counter["n"] += 1
        amount = Decimal(total)
        order = Order(
            user_id=customer_id,
            order_number=f"ORD-20261019-{counter['n']:04d}",
            status=OrderStatus(status).value,
            payment_method=PaymentMethod.UPI.value,
            shipping_address_id=address_id,
            subtotal=amount,
            shipping=Decimal("0.00"),
            discount=Decimal("0.00"),
            total=amount,
            **overrides,
        )
        order.items.append(
            OrderItem(
                product_id=product_id,
                quantity=quantity,
                price=(amount / quantity).quantize(Decimal("0.01")),
                discount=Decimal("0.00"),
                total=amount,
                size="M",
                color="Blue",
            )
        )
        db_session.add(order)
        await db_session.commit()
        await db_session.refresh(order)
        return order

    return _make


@pytest.fixture
def admin_headers(sample_admin):
    """Bearer header for sample_admin."""
    from middleware.auth import issue_access_token

    token = issue_access_token(user_id=sample_admin.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def coupon_payload():
    """Valid coupon body in the API's camelCase shape."""
    return {
        "code": "festive20",
        "type": "PERCENTAGE",
        "value": "20",
        "minPurchase": "50.00",
        "maxDiscount": "15.00",
        "usageLimit": 100,
        "expiresAt": (datetime.utcnow() + timedelta(days=30)).isoformat(),
        "isActive": True,
    }
