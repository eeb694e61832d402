# ==============================================================================
# CHECKOUT TESTS
# ==============================================================================
# Gateway sessions, webhook confirmation and verify polling
# ==============================================================================

from decimal import Decimal

import pytest

from licensestore.core.exceptions import (
    BadRequestError,
    NotFoundError,
    ServiceUnavailableError,
)
from licensestore.database.unit_of_work.uow import UnitOfWork
from licensestore.domain_models import OrderStatus, PaymentMethod
from licensestore.schemas.checkout import PaymentWebhookEvent
from licensestore.services.checkout_service import CheckoutService


@pytest.fixture
def checkout_service(adapter, order_service, completion_service, gateway) -> CheckoutService:
    return CheckoutService(
        adapter,
        order_service=order_service,
        completion_service=completion_service,
        gateway=gateway,
    )


async def _open_session(checkout_service, seed, **product_kwargs):
    user_id = await seed.user()
    product_id = await seed.product(**product_kwargs)
    session = await checkout_service.create_checkout_session(
        user_id, [{"product_id": product_id, "quantity": 1}]
    )
    return user_id, product_id, session


class TestCheckoutSession:
    """Tests for gateway session creation."""

    @pytest.mark.asyncio
    async def test_creates_session_and_links_order(self, checkout_service, order_service, seed):
        user_id, _, session = await _open_session(checkout_service, seed, price="99.00")

        assert session.session_id.startswith("cs_test_")
        assert session.session_id in session.url

        order = await order_service.get_order(session.order_id, user_id)
        assert order.status == OrderStatus.PENDING
        assert order.payment_ref == session.session_id
        assert order.total == session.total

    @pytest.mark.asyncio
    async def test_gateway_down(self, checkout_service, gateway, seed):
        gateway.available = False

        with pytest.raises(ServiceUnavailableError):
            await _open_session(checkout_service, seed)


class TestWebhook:
    """Tests for gateway event handling."""

    @pytest.mark.asyncio
    async def test_webhook_completes_order(self, checkout_service, seed):
        _, _, session = await _open_session(checkout_service, seed)

        ack = await checkout_service.handle_webhook(
            PaymentWebhookEvent(event_id="evt_1", session_id=session.session_id)
        )

        assert ack.received is True
        assert ack.duplicate is False
        assert ack.order_status == OrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_webhook_by_metadata_order_id(self, checkout_service, seed):
        _, _, session = await _open_session(checkout_service, seed)

        ack = await checkout_service.handle_webhook(
            PaymentWebhookEvent(event_id="evt_meta", metadata={"order_id": session.order_id})
        )

        assert ack.order_status == OrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_redelivered_event_is_ignored(self, adapter, checkout_service, seed):
        _, _, session = await _open_session(checkout_service, seed)
        event = PaymentWebhookEvent(event_id="evt_dup", session_id=session.session_id)

        first = await checkout_service.handle_webhook(event)
        second = await checkout_service.handle_webhook(event)

        assert first.duplicate is False
        assert second.duplicate is True
        async with UnitOfWork(adapter) as uow:
            assert await uow.licenses.count_for_order(session.order_id) == 1

    @pytest.mark.asyncio
    async def test_distinct_events_complete_once(self, adapter, checkout_service, seed):
        _, _, session = await _open_session(checkout_service, seed)

        await checkout_service.handle_webhook(
            PaymentWebhookEvent(event_id="evt_a", session_id=session.session_id)
        )
        ack = await checkout_service.handle_webhook(
            PaymentWebhookEvent(event_id="evt_b", order_id=session.order_id)
        )

        assert ack.duplicate is False
        assert ack.order_status == OrderStatus.COMPLETED
        async with UnitOfWork(adapter) as uow:
            assert await uow.licenses.count_for_order(session.order_id) == 1

    @pytest.mark.asyncio
    async def test_unpaid_event_leaves_order_pending(self, checkout_service, seed):
        _, _, session = await _open_session(checkout_service, seed)

        ack = await checkout_service.handle_webhook(
            PaymentWebhookEvent(
                event_id="evt_expired",
                type="checkout.session.expired",
                session_id=session.session_id,
                paid=False,
            )
        )

        assert ack.order_status == OrderStatus.PENDING

    @pytest.mark.asyncio
    async def test_failed_completion_allows_retry(
        self, adapter, checkout_service, order_service, completion_service, seed
    ):
        other = await seed.user()
        _, product_id, session = await _open_session(checkout_service, seed, stock=1)
        rival = await order_service.create_order(other, [{"product_id": product_id, "quantity": 1}])
        await completion_service.complete_order(rival.id)

        event = PaymentWebhookEvent(event_id="evt_retry", session_id=session.session_id)
        with pytest.raises(BadRequestError):
            await checkout_service.handle_webhook(event)

        async with UnitOfWork(adapter) as uow:
            product = await uow.products.get_by_id(product_id)
            product.stock = 5

        ack = await checkout_service.handle_webhook(event)
        assert ack.duplicate is False
        assert ack.order_status == OrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_unknown_reference(self, checkout_service):
        with pytest.raises(NotFoundError):
            await checkout_service.confirm_payment("evt_x", session_id="cs_test_unknown")
        with pytest.raises(BadRequestError):
            await checkout_service.confirm_payment("evt_y")

    @pytest.mark.asyncio
    async def test_balance_order_is_not_confirmable(self, adapter, checkout_service, order_service, seed):
        user_id = await seed.user(balance="0.00")
        product_id = await seed.product(price="80.00")
        order = await order_service.create_order(
            user_id, [{"product_id": product_id, "quantity": 1}], PaymentMethod.BALANCE
        )

        with pytest.raises(BadRequestError):
            await checkout_service.confirm_payment("evt_forged", order_id=order.id, paid=True)

        async with UnitOfWork(adapter) as uow:
            assert (await uow.orders.get_by_id(order.id)).status == OrderStatus.PENDING
            assert await uow.licenses.count_for_order(order.id) == 0
            assert (await uow.users.get_by_id(user_id)).balance == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_order_without_gateway_session_is_not_confirmable(
        self, adapter, checkout_service, order_service, seed
    ):
        user_id = await seed.user()
        product_id = await seed.product()
        order = await order_service.create_order(user_id, [{"product_id": product_id, "quantity": 1}])

        with pytest.raises(BadRequestError):
            await checkout_service.confirm_payment("evt_nosession", order_id=order.id)

        async with UnitOfWork(adapter) as uow:
            assert (await uow.orders.get_by_id(order.id)).status == OrderStatus.PENDING

    @pytest.mark.asyncio
    async def test_session_must_match_order(self, adapter, checkout_service, seed):
        _, _, paid_session = await _open_session(checkout_service, seed)
        _, _, unpaid_session = await _open_session(checkout_service, seed)

        with pytest.raises(BadRequestError):
            await checkout_service.confirm_payment(
                "evt_swap",
                session_id=paid_session.session_id,
                order_id=unpaid_session.order_id,
            )

        async with UnitOfWork(adapter) as uow:
            for session in (paid_session, unpaid_session):
                order = await uow.orders.get_by_id(session.order_id)
                assert order.status == OrderStatus.PENDING

        ack = await checkout_service.handle_webhook(
            PaymentWebhookEvent(event_id="evt_swap", session_id=paid_session.session_id)
        )
        assert ack.duplicate is False
        assert ack.order_status == OrderStatus.COMPLETED

    def test_event_requires_reference(self):
        with pytest.raises(ValueError):
            PaymentWebhookEvent(event_id="evt_none")


class TestVerifyPayment:
    """Tests for polling the gateway."""

    @pytest.mark.asyncio
    async def test_pending_until_paid(self, checkout_service, gateway, seed):
        user_id, _, session = await _open_session(checkout_service, seed)

        pending = await checkout_service.verify_payment(session.order_id, user_id)
        assert pending.status == "pending"

        gateway.mark_paid(session.session_id)
        result = await checkout_service.verify_payment(session.order_id, user_id)

        assert result.status == "completed"
        assert result.order.status == OrderStatus.COMPLETED
        assert len(result.order.licenses) == 1

    @pytest.mark.asyncio
    async def test_verify_after_webhook(self, checkout_service, seed):
        user_id, _, session = await _open_session(checkout_service, seed)
        await checkout_service.handle_webhook(
            PaymentWebhookEvent(event_id="evt_v", session_id=session.session_id)
        )

        result = await checkout_service.verify_payment(session.order_id, user_id)

        assert result.status == "completed"

    @pytest.mark.asyncio
    async def test_cancelled_order(self, checkout_service, order_service, seed):
        user_id, _, session = await _open_session(checkout_service, seed)
        await order_service.cancel_order(session.order_id, user_id)

        result = await checkout_service.verify_payment(session.order_id, user_id)

        assert result.status == "cancelled"

    @pytest.mark.asyncio
    async def test_order_without_session(self, checkout_service, order_service, seed):
        user_id = await seed.user()
        product_id = await seed.product()
        order = await order_service.create_order(user_id, [{"product_id": product_id, "quantity": 1}])

        with pytest.raises(BadRequestError):
            await checkout_service.verify_payment(order.id, user_id)

    @pytest.mark.asyncio
    async def test_gateway_down_during_verify(self, checkout_service, gateway, seed):
        user_id, _, session = await _open_session(checkout_service, seed)
        gateway.available = False

        with pytest.raises(ServiceUnavailableError):
            await checkout_service.verify_payment(session.order_id, user_id)
