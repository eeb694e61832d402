# ==============================================================================
# ORDER COMPLETION TESTS
# ==============================================================================
# Exactly-once completion: licenses, stock, points, promo redemption and
# post-commit notifications
# ==============================================================================

from decimal import Decimal

import pytest

from licensestore.core.exceptions import InsufficientStockError, NotFoundError
from licensestore.database.unit_of_work.uow import UnitOfWork
from licensestore.domain_models import (
    LicenseStatus,
    NotificationType,
    OrderStatus,
    TransactionType,
)
from licensestore.services.completion_service import OrderCompletionService
from licensestore.services.license_service import validate_license_key_format
from licensestore.services.notification_service import PostCommitDispatcher
from tests.conftest import RecordingSink


class TestCompleteOrder:
    """Tests for the winning completion path."""

    @pytest.mark.asyncio
    async def test_points_example(self, adapter, order_service, completion_service, seed):
        """Two units at 10 points each earn 20 points."""
        user_id = await seed.user()
        product_id = await seed.product(price="200.00", reward_points=10, name="Pro Suite")
        order = await order_service.create_order(
            user_id, [{"product_id": product_id, "quantity": 2}]
        )

        completed = await completion_service.complete_order(order.id)

        assert completed.status == OrderStatus.COMPLETED
        assert completed.completed_at is not None
        assert len(completed.licenses) == 2
        assert all(lic.status == LicenseStatus.ACTIVE for lic in completed.licenses)
        assert all(validate_license_key_format(lic.license_key) for lic in completed.licenses)

        async with UnitOfWork(adapter) as uow:
            user = await uow.users.get_by_id(user_id)
            assert user.points == 20

            txns = await uow.transactions.list_for_ref(order.id)
            earned = [t for t in txns if t.type == TransactionType.POINTS_EARNED]
            assert len(earned) == 1
            assert earned[0].points == 20
            assert earned[0].reference_id.startswith("TXN-")

            notifications = await uow.notifications.list_for_user(user_id)
            kinds = sorted(n.type.value for n in notifications)
            assert kinds == ["ORDER", "ORDER", "SYSTEM"]
            system = next(n for n in notifications if n.type == NotificationType.SYSTEM)
            assert "20" in system.message
            assert order.id[:8] in system.message

    @pytest.mark.asyncio
    async def test_no_points_without_reward(self, adapter, order_service, completion_service, seed):
        user_id = await seed.user()
        product_id = await seed.product()
        order = await order_service.create_order(user_id, [{"product_id": product_id, "quantity": 1}])

        await completion_service.complete_order(order.id)

        async with UnitOfWork(adapter) as uow:
            assert (await uow.users.get_by_id(user_id)).points == 0
            assert await uow.transactions.list_for_ref(order.id) == []

    @pytest.mark.asyncio
    async def test_decrements_tracked_stock_only(self, adapter, order_service, completion_service, seed):
        user_id = await seed.user()
        tracked = await seed.product(stock=5)
        unlimited = await seed.product(stock=-1)
        order = await order_service.create_order(
            user_id,
            [
                {"product_id": tracked, "quantity": 2},
                {"product_id": unlimited, "quantity": 3},
            ],
        )

        await completion_service.complete_order(order.id)

        async with UnitOfWork(adapter) as uow:
            assert (await uow.products.get_by_id(tracked)).stock == 3
            assert (await uow.products.get_by_id(unlimited)).stock == -1
            assert await uow.licenses.count_for_order(order.id) == 5

    @pytest.mark.asyncio
    async def test_records_promo_usage(self, adapter, order_service, completion_service, seed):
        user_id = await seed.user()
        product_id = await seed.product()
        promo_id = await seed.promo(code="REDEEM")
        order = await order_service.create_order(
            user_id, [{"product_id": product_id, "quantity": 1}], promo_code="REDEEM"
        )

        await completion_service.complete_order(order.id)

        async with UnitOfWork(adapter) as uow:
            assert await uow.promo_codes.has_usage(user_id, promo_id)

    @pytest.mark.asyncio
    async def test_second_call_is_a_no_op(self, adapter, order_service, completion_service, seed):
        user_id = await seed.user()
        product_id = await seed.product(stock=10, reward_points=5)
        order = await order_service.create_order(user_id, [{"product_id": product_id, "quantity": 1}])

        first = await completion_service.complete_order(order.id)
        second = await completion_service.complete_order(order.id)

        assert second.status == OrderStatus.COMPLETED
        assert [lic.id for lic in second.licenses] == [lic.id for lic in first.licenses]
        async with UnitOfWork(adapter) as uow:
            assert (await uow.users.get_by_id(user_id)).points == 5
            assert (await uow.products.get_by_id(product_id)).stock == 9

    @pytest.mark.asyncio
    async def test_cancelled_order_is_not_completed(self, order_service, completion_service, seed):
        user_id = await seed.user()
        product_id = await seed.product()
        order = await order_service.create_order(user_id, [{"product_id": product_id, "quantity": 1}])
        await order_service.cancel_order(order.id, user_id)

        result = await completion_service.complete_order(order.id)

        assert result.status == OrderStatus.CANCELLED
        assert result.licenses == []

    @pytest.mark.asyncio
    async def test_unknown_order(self, completion_service):
        with pytest.raises(NotFoundError):
            await completion_service.complete_order("missing")


class TestCompletionRollback:
    """Tests for all-or-nothing completion."""

    @pytest.mark.asyncio
    async def test_stock_failure_mid_loop_rolls_back(
        self, adapter, order_service, completion_service, seed, sink
    ):
        user_id = await seed.user()
        other_id = await seed.user()
        plenty = await seed.product(stock=10, reward_points=10)
        scarce = await seed.product(stock=1, name="Scarce Tool")
        promo_id = await seed.promo(code="ROLL")

        order = await order_service.create_order(
            user_id,
            [
                {"product_id": plenty, "quantity": 1},
                {"product_id": scarce, "quantity": 1},
            ],
            promo_code="ROLL",
        )
        rival = await order_service.create_order(other_id, [{"product_id": scarce, "quantity": 1}])
        await completion_service.complete_order(rival.id)

        with pytest.raises(InsufficientStockError):
            await completion_service.complete_order(order.id)
        await completion_service.dispatcher.drain()

        reloaded = await order_service.get_order(order.id)
        assert reloaded.status == OrderStatus.PENDING
        assert reloaded.completed_at is None
        assert reloaded.licenses == []

        async with UnitOfWork(adapter) as uow:
            assert (await uow.products.get_by_id(plenty)).stock == 10
            assert (await uow.users.get_by_id(user_id)).points == 0
            assert not await uow.promo_codes.has_usage(user_id, promo_id)
            assert await uow.notifications.list_for_user(user_id) == []

        # Only the rival's completion reached the sink
        assert [o.id for o, _ in sink.confirmed] == [rival.id]


class TestCompletionNotifications:
    """Tests for post-commit sink delivery."""

    @pytest.mark.asyncio
    async def test_sink_called_after_commit(self, order_service, completion_service, seed, sink):
        user_id = await seed.user(username="alice")
        product_id = await seed.product(reward_points=7)
        order = await order_service.create_order(user_id, [{"product_id": product_id, "quantity": 2}])

        completed = await completion_service.complete_order(order.id)
        await completion_service.dispatcher.drain()

        assert len(sink.confirmed) == 1
        confirmed_order, snapshot = sink.confirmed[0]
        assert confirmed_order.id == order.id
        assert snapshot.username == "alice"
        assert snapshot.points == 14
        assert sorted(lic.license_key for _, lic in sink.issued) == sorted(
            lic.license_key for lic in completed.licenses
        )

    @pytest.mark.asyncio
    async def test_sink_failure_does_not_undo_completion(self, adapter, order_service, seed):
        failing = RecordingSink(fail=True)
        dispatcher = PostCommitDispatcher()
        service = OrderCompletionService(adapter, sink=failing, dispatcher=dispatcher)
        user_id = await seed.user()
        product_id = await seed.product()
        order = await order_service.create_order(user_id, [{"product_id": product_id, "quantity": 1}])

        completed = await service.complete_order(order.id)
        await dispatcher.drain()

        assert completed.status == OrderStatus.COMPLETED
        assert (await order_service.get_order(order.id)).status == OrderStatus.COMPLETED
        assert dispatcher.pending == 0
