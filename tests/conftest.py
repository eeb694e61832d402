# ==============================================================================
# CONFTEST - Pytest Fixtures and Configuration
# ==============================================================================
# Shared fixtures: a throwaway SQLite store per test, seed helpers and a
# notification sink that records what it was asked to deliver
# ==============================================================================

from __future__ import annotations

import os
from datetime import datetime
from decimal import Decimal
from typing import AsyncGenerator, List, Optional, Tuple
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

# Set test environment before importing the application
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "false"
os.environ["DATABASE_TYPE"] = "sqlite"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["PAYMENT_GATEWAY"] = "sandbox"
os.environ["PAYMENT_WEBHOOK_SECRET"] = "whsec_test"

from licensestore.database.adapters.sqlite_adapter import SQLiteAdapter  # noqa: E402
from licensestore.database.factory import DatabaseFactory  # noqa: E402
from licensestore.database.unit_of_work.uow import UnitOfWork  # noqa: E402
from licensestore.domain_models import (  # noqa: E402
    DiscountType,
    Product,
    PromoCode,
    User,
)
from licensestore.schemas.license import LicenseResponse  # noqa: E402
from licensestore.schemas.order import OrderResponse  # noqa: E402
from licensestore.schemas.user import UserSnapshot  # noqa: E402
from licensestore.services.completion_service import OrderCompletionService  # noqa: E402
from licensestore.services.gateway import SandboxPaymentGateway  # noqa: E402
from licensestore.services.license_service import LicenseService  # noqa: E402
from licensestore.services.notification_service import PostCommitDispatcher  # noqa: E402
from licensestore.services.order_service import OrderService  # noqa: E402
from licensestore.services.promo_service import PromoCodeService  # noqa: E402


# ==============================================================================
# DATABASE FIXTURES
# ==============================================================================

@pytest_asyncio.fixture
async def adapter(tmp_path) -> AsyncGenerator[SQLiteAdapter, None]:
    """Connected adapter on a fresh SQLite file with all tables created."""
    db = SQLiteAdapter(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await db.connect()
    yield db
    await db.disconnect()


# ==============================================================================
# SEED HELPERS
# ==============================================================================

class StoreSeeder:
    """Inserts users, products and promo codes directly through the ORM."""

    def __init__(self, adapter: SQLiteAdapter) -> None:
        self._adapter = adapter

    async def user(
        self,
        balance: str = "0.00",
        points: int = 0,
        username: Optional[str] = None,
        is_banned: bool = False,
    ) -> str:
        user = User(
            username=username or f"user_{uuid4().hex[:8]}",
            email=f"{uuid4().hex[:8]}@example.com",
            balance=Decimal(balance),
            points=points,
            is_banned=is_banned,
        )
        async with UnitOfWork(self._adapter) as uow:
            await uow.users.add(user)
        return user.id

    async def product(
        self,
        price: str = "100.00",
        stock: int = -1,
        reward_points: Optional[int] = None,
        name: Optional[str] = None,
        is_active: bool = True,
        flash_sale_price: Optional[str] = None,
        flash_sale_starts: Optional[datetime] = None,
        flash_sale_ends: Optional[datetime] = None,
    ) -> str:
        slug = f"product-{uuid4().hex[:8]}"
        product = Product(
            name=name or slug,
            slug=slug,
            price=Decimal(price),
            stock=stock,
            reward_points=reward_points,
            is_active=is_active,
            is_flash_sale=flash_sale_price is not None,
            flash_sale_price=Decimal(flash_sale_price) if flash_sale_price else None,
            flash_sale_starts=flash_sale_starts,
            flash_sale_ends=flash_sale_ends,
            download_key="secret-download-key",
        )
        async with UnitOfWork(self._adapter) as uow:
            await uow.products.add(product)
        return product.id

    async def promo(
        self,
        code: str = "SAVE10",
        discount: str = "10",
        type: DiscountType = DiscountType.PERCENTAGE,
        min_purchase: Optional[str] = None,
        max_discount: Optional[str] = None,
        usage_limit: Optional[int] = None,
        used_count: int = 0,
        expires_at: Optional[datetime] = None,
        is_active: bool = True,
    ) -> str:
        promo = PromoCode(
            code=code,
            discount=Decimal(discount),
            type=type,
            min_purchase=Decimal(min_purchase) if min_purchase else None,
            max_discount=Decimal(max_discount) if max_discount else None,
            usage_limit=usage_limit,
            used_count=used_count,
            expires_at=expires_at,
            is_active=is_active,
        )
        async with UnitOfWork(self._adapter) as uow:
            await uow.promo_codes.add(promo)
        return promo.id

    async def completed_spend(self, user_id: str, total: str) -> None:
        """Give a user lifetime spend through a completed order."""
        product_id = await self.product(price=total)
        orders = OrderService(self._adapter)
        completion = OrderCompletionService(self._adapter)
        order = await orders.create_order(user_id, [{"product_id": product_id, "quantity": 1}])
        await completion.complete_order(order.id)
        await completion.dispatcher.drain()


@pytest_asyncio.fixture
async def seed(adapter: SQLiteAdapter) -> StoreSeeder:
    return StoreSeeder(adapter)


# ==============================================================================
# SERVICE FIXTURES
# ==============================================================================

class RecordingSink:
    """Notification sink that keeps every call for assertions."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.confirmed: List[Tuple[OrderResponse, UserSnapshot]] = []
        self.issued: List[Tuple[UserSnapshot, LicenseResponse]] = []

    async def notify_order_confirmed(self, order: OrderResponse, user: UserSnapshot) -> None:
        if self.fail:
            raise RuntimeError("mail server down")
        self.confirmed.append((order, user))

    async def notify_license_issued(self, user: UserSnapshot, license: LicenseResponse) -> None:
        if self.fail:
            raise RuntimeError("mail server down")
        self.issued.append((user, license))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def dispatcher() -> PostCommitDispatcher:
    return PostCommitDispatcher()


@pytest.fixture
def gateway() -> SandboxPaymentGateway:
    return SandboxPaymentGateway()


@pytest.fixture
def promo_service(adapter: SQLiteAdapter) -> PromoCodeService:
    return PromoCodeService(adapter)


@pytest.fixture
def order_service(adapter: SQLiteAdapter, promo_service: PromoCodeService) -> OrderService:
    return OrderService(adapter, promo_service=promo_service)


@pytest.fixture
def completion_service(
    adapter: SQLiteAdapter,
    promo_service: PromoCodeService,
    sink: RecordingSink,
    dispatcher: PostCommitDispatcher,
) -> OrderCompletionService:
    return OrderCompletionService(
        adapter,
        license_service=LicenseService(),
        promo_service=promo_service,
        sink=sink,
        dispatcher=dispatcher,
    )


# ==============================================================================
# HTTP CLIENT FIXTURES
# ==============================================================================

@pytest_asyncio.fixture
async def app(tmp_path) -> AsyncGenerator[FastAPI, None]:
    """Application wired to a fresh SQLite store."""
    DatabaseFactory.reset()

    # Import app after environment is set
    from licensestore.main import create_app

    application = create_app()
    await DatabaseFactory.initialize(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'api.db'}"
    )
    yield application

    await application.state.dispatcher.drain()
    await DatabaseFactory.shutdown()
    DatabaseFactory.reset()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        timeout=30.0,
    ) as async_client:
        yield async_client


@pytest_asyncio.fixture
async def api_seed(client: AsyncClient) -> StoreSeeder:
    """Seeder writing to the store behind ``client``."""
    return StoreSeeder(DatabaseFactory.get_adapter())
