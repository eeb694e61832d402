# ==============================================================================
# BALANCE PAYMENT TESTS
# ==============================================================================
# Reserve, debit, record and complete in one transaction
# ==============================================================================

from decimal import Decimal

import pytest

from licensestore.core.exceptions import (
    BadRequestError,
    InsufficientFundsError,
    NotFoundError,
)
from licensestore.database.unit_of_work.uow import UnitOfWork
from licensestore.domain_models import OrderStatus, PaymentMethod, TransactionType
from licensestore.services.balance_service import BalancePaymentService


@pytest.fixture
def balance_service(adapter, completion_service) -> BalancePaymentService:
    return BalancePaymentService(adapter, completion_service=completion_service)


class TestBalancePayment:
    """Tests for paying an order from the account balance."""

    @pytest.mark.asyncio
    async def test_pay_and_complete(self, adapter, order_service, balance_service, seed):
        user_id = await seed.user(balance="500.00")
        product_id = await seed.product(price="120.00", reward_points=3)
        order = await order_service.create_order(
            user_id, [{"product_id": product_id, "quantity": 1}], PaymentMethod.BALANCE
        )

        result = await balance_service.pay(user_id, order.id)

        assert result.success is True
        assert result.order.status == OrderStatus.COMPLETED
        assert len(result.order.licenses) == 1

        async with UnitOfWork(adapter) as uow:
            user = await uow.users.get_by_id(user_id)
            assert user.balance == Decimal("380.00")
            assert user.points == 3

            txns = await uow.transactions.list_for_ref(order.id)
            purchase = [t for t in txns if t.type == TransactionType.PURCHASE]
            assert len(purchase) == 1
            assert purchase[0].amount == Decimal("120.00")

    @pytest.mark.asyncio
    async def test_insufficient_balance_rolls_back(self, adapter, order_service, balance_service, seed):
        user_id = await seed.user(balance="50.00")
        product_id = await seed.product(price="120.00")
        order = await order_service.create_order(
            user_id, [{"product_id": product_id, "quantity": 1}], PaymentMethod.BALANCE
        )

        with pytest.raises(InsufficientFundsError):
            await balance_service.pay(user_id, order.id)

        assert (await order_service.get_order(order.id)).status == OrderStatus.PENDING
        async with UnitOfWork(adapter) as uow:
            assert (await uow.users.get_by_id(user_id)).balance == Decimal("50.00")
            assert await uow.transactions.list_for_ref(order.id) == []

    @pytest.mark.asyncio
    async def test_pay_twice(self, adapter, order_service, balance_service, seed):
        user_id = await seed.user(balance="500.00")
        product_id = await seed.product(price="100.00")
        order = await order_service.create_order(
            user_id, [{"product_id": product_id, "quantity": 1}], PaymentMethod.BALANCE
        )

        await balance_service.pay(user_id, order.id)
        with pytest.raises(BadRequestError):
            await balance_service.pay(user_id, order.id)

        async with UnitOfWork(adapter) as uow:
            assert (await uow.users.get_by_id(user_id)).balance == Decimal("400.00")

    @pytest.mark.asyncio
    async def test_stock_failure_refunds_debit(self, adapter, order_service, balance_service, seed):
        user_id = await seed.user(balance="500.00")
        other_id = await seed.user(balance="500.00")
        product_id = await seed.product(price="100.00", stock=1)
        order = await order_service.create_order(
            user_id, [{"product_id": product_id, "quantity": 1}], PaymentMethod.BALANCE
        )
        rival = await order_service.create_order(
            other_id, [{"product_id": product_id, "quantity": 1}], PaymentMethod.BALANCE
        )
        await balance_service.pay(other_id, rival.id)

        with pytest.raises(BadRequestError):
            await balance_service.pay(user_id, order.id)

        assert (await order_service.get_order(order.id)).status == OrderStatus.PENDING
        async with UnitOfWork(adapter) as uow:
            assert (await uow.users.get_by_id(user_id)).balance == Decimal("500.00")

    @pytest.mark.asyncio
    async def test_rejections(self, order_service, balance_service, seed):
        owner = await seed.user(balance="500.00")
        stranger = await seed.user(balance="500.00")
        product_id = await seed.product()
        external = await order_service.create_order(owner, [{"product_id": product_id, "quantity": 1}])
        balance_order = await order_service.create_order(
            owner, [{"product_id": product_id, "quantity": 1}], PaymentMethod.BALANCE
        )

        with pytest.raises(NotFoundError):
            await balance_service.pay(owner, "missing")
        with pytest.raises(BadRequestError):
            await balance_service.pay(owner, external.id)
        with pytest.raises(BadRequestError):
            await balance_service.pay(stranger, balance_order.id)
