# ==============================================================================
# API ENDPOINT TESTS
# ==============================================================================
# HTTP surface: envelopes, identity header and end-to-end payment flows
# ==============================================================================

import json
from decimal import Decimal
from typing import Optional

import pytest
from httpx import AsyncClient

from licensestore.core.settings import settings
from licensestore.services.gateway import sign_webhook_payload

WEBHOOK_URL = "/api/v1/webhooks/payment"


def _as_user(user_id: str) -> dict:
    return {"X-User-ID": user_id}


async def _post_webhook(client: AsyncClient, event: dict, signature: Optional[str] = None):
    body = json.dumps(event).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    if signature is None:
        signature = sign_webhook_payload(body, settings.PAYMENT_WEBHOOK_SECRET)
    if signature:
        headers["X-Webhook-Signature"] = signature
    return await client.post(WEBHOOK_URL, content=body, headers=headers)


class TestHealth:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["health"] == "/health"


class TestOrderEndpoints:
    """Tests for /orders."""

    @pytest.mark.asyncio
    async def test_requires_user_header(self, client: AsyncClient):
        response = await client.get("/api/v1/orders")

        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, client: AsyncClient, api_seed):
        user_id = await api_seed.user()
        product_id = await api_seed.product(price="1000.00")
        await api_seed.promo(code="SAVE10", discount="10")

        response = await client.post(
            "/api/v1/orders",
            json={
                "items": [{"product_id": product_id, "quantity": 1}],
                "promo_code": "save10",
            },
            headers=_as_user(user_id),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        order = data["data"]
        assert order["status"] == "PENDING"
        assert Decimal(order["total"]) == Decimal("900.00")
        assert "download_key" not in order["items"][0]["product"]

        response = await client.get(f"/api/v1/orders/{order['id']}", headers=_as_user(user_id))
        assert response.status_code == 200
        assert response.json()["data"]["id"] == order["id"]

        response = await client.get("/api/v1/orders", headers=_as_user(user_id))
        assert [o["id"] for o in response.json()["data"]] == [order["id"]]

    @pytest.mark.asyncio
    async def test_validation_error_envelope(self, client: AsyncClient, api_seed):
        user_id = await api_seed.user()

        response = await client.post(
            "/api/v1/orders",
            json={"items": []},
            headers=_as_user(user_id),
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_unknown_product(self, client: AsyncClient, api_seed):
        user_id = await api_seed.user()

        response = await client.post(
            "/api/v1/orders",
            json={"items": [{"product_id": "missing", "quantity": 1}]},
            headers=_as_user(user_id),
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["missing_ids"] == ["missing"]

    @pytest.mark.asyncio
    async def test_validate_cart(self, client: AsyncClient, api_seed):
        product_id = await api_seed.product(price="15.00", stock=1)

        response = await client.post(
            "/api/v1/orders/validate",
            json=[{"product_id": product_id, "quantity": 2}],
        )

        assert response.status_code == 200
        report = response.json()["data"]
        assert report["valid"] is False
        assert report["items"][0]["in_stock"] is False

    @pytest.mark.asyncio
    async def test_cancel(self, client: AsyncClient, api_seed):
        user_id = await api_seed.user()
        product_id = await api_seed.product()
        created = await client.post(
            "/api/v1/orders",
            json={"items": [{"product_id": product_id, "quantity": 1}]},
            headers=_as_user(user_id),
        )
        order_id = created.json()["data"]["id"]

        response = await client.post(f"/api/v1/orders/{order_id}/cancel", headers=_as_user(user_id))
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "CANCELLED"

        response = await client.post(f"/api/v1/orders/{order_id}/cancel", headers=_as_user(user_id))
        assert response.status_code == 400


class TestPromoEndpoint:
    """Tests for /promo/preview."""

    @pytest.mark.asyncio
    async def test_preview(self, client: AsyncClient, api_seed):
        user_id = await api_seed.user()
        await api_seed.promo(code="HALF", discount="50", max_discount="100")

        response = await client.post(
            "/api/v1/promo/preview",
            json={"code": "half", "cart_total": "1000"},
            headers=_as_user(user_id),
        )

        assert response.status_code == 200
        assert Decimal(response.json()["data"]["computed_discount"]) == Decimal("100")

    @pytest.mark.asyncio
    async def test_unknown_code(self, client: AsyncClient, api_seed):
        user_id = await api_seed.user()

        response = await client.post(
            "/api/v1/promo/preview",
            json={"code": "NOPE", "cart_total": "10"},
            headers=_as_user(user_id),
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestPaymentFlows:
    """End-to-end payment flows over HTTP."""

    @pytest.mark.asyncio
    async def test_balance_flow(self, client: AsyncClient, api_seed):
        user_id = await api_seed.user(balance="100.00")
        product_id = await api_seed.product(price="60.00", reward_points=4)
        created = await client.post(
            "/api/v1/orders",
            json={
                "items": [{"product_id": product_id, "quantity": 1}],
                "payment_method": "BALANCE",
            },
            headers=_as_user(user_id),
        )
        order_id = created.json()["data"]["id"]

        response = await client.post(f"/api/v1/checkout/balance/{order_id}", headers=_as_user(user_id))

        assert response.status_code == 200
        result = response.json()["data"]
        assert result["success"] is True
        assert result["order"]["status"] == "COMPLETED"
        assert len(result["order"]["licenses"]) == 1

        response = await client.post(f"/api/v1/checkout/balance/{order_id}", headers=_as_user(user_id))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_insufficient_funds(self, client: AsyncClient, api_seed):
        user_id = await api_seed.user(balance="10.00")
        product_id = await api_seed.product(price="60.00")
        created = await client.post(
            "/api/v1/orders",
            json={
                "items": [{"product_id": product_id, "quantity": 1}],
                "payment_method": "BALANCE",
            },
            headers=_as_user(user_id),
        )
        order_id = created.json()["data"]["id"]

        response = await client.post(f"/api/v1/checkout/balance/{order_id}", headers=_as_user(user_id))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INSUFFICIENT_FUNDS"

    @pytest.mark.asyncio
    async def test_gateway_flow_with_webhook(self, client: AsyncClient, api_seed):
        user_id = await api_seed.user()
        product_id = await api_seed.product(price="250.00")

        response = await client.post(
            "/api/v1/checkout/session",
            json={"items": [{"product_id": product_id, "quantity": 1}]},
            headers=_as_user(user_id),
        )
        assert response.status_code == 201
        session = response.json()["data"]

        event = {"event_id": "evt_http_1", "session_id": session["session_id"]}
        first = await _post_webhook(client, event)
        second = await _post_webhook(client, event)

        assert first.status_code == 200
        assert first.json()["data"]["order_status"] == "COMPLETED"
        assert second.json()["data"]["duplicate"] is True

        response = await client.post(
            f"/api/v1/checkout/verify/{session['order_id']}",
            headers=_as_user(user_id),
        )
        assert response.json()["data"]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_gateway_flow_with_verify(self, app, client: AsyncClient, api_seed):
        user_id = await api_seed.user()
        product_id = await api_seed.product()
        response = await client.post(
            "/api/v1/checkout/session",
            json={"items": [{"product_id": product_id, "quantity": 1}]},
            headers=_as_user(user_id),
        )
        session = response.json()["data"]

        pending = await client.post(
            f"/api/v1/checkout/verify/{session['order_id']}",
            headers=_as_user(user_id),
        )
        assert pending.json()["data"]["status"] == "pending"

        app.state.payment_gateway.mark_paid(session["session_id"])
        done = await client.post(
            f"/api/v1/checkout/verify/{session['order_id']}",
            headers=_as_user(user_id),
        )
        assert done.json()["data"]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_gateway_unavailable(self, app, client: AsyncClient, api_seed):
        app.state.payment_gateway.available = False
        user_id = await api_seed.user()
        product_id = await api_seed.product()

        response = await client.post(
            "/api/v1/checkout/session",
            json={"items": [{"product_id": product_id, "quantity": 1}]},
            headers=_as_user(user_id),
        )

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "SERVICE_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_webhook_requires_reference(self, client: AsyncClient):
        response = await _post_webhook(client, {"event_id": "evt_bad"})

        assert response.status_code == 422


class TestWebhookSignature:
    """Tests for webhook signature checks."""

    async def _open_session(self, client: AsyncClient, api_seed) -> dict:
        user_id = await api_seed.user()
        product_id = await api_seed.product()
        response = await client.post(
            "/api/v1/checkout/session",
            json={"items": [{"product_id": product_id, "quantity": 1}]},
            headers=_as_user(user_id),
        )
        session = response.json()["data"]
        session["user_id"] = user_id
        return session

    async def _status(self, client: AsyncClient, session: dict) -> str:
        response = await client.get(
            f"/api/v1/orders/{session['order_id']}",
            headers=_as_user(session["user_id"]),
        )
        return response.json()["data"]["status"]

    @pytest.mark.asyncio
    async def test_missing_signature(self, client: AsyncClient, api_seed):
        session = await self._open_session(client, api_seed)

        response = await _post_webhook(
            client, {"event_id": "evt_unsigned", "session_id": session["session_id"]}, signature=""
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"
        assert await self._status(client, session) == "PENDING"

    @pytest.mark.asyncio
    async def test_invalid_signature(self, client: AsyncClient, api_seed):
        session = await self._open_session(client, api_seed)
        event = {"event_id": "evt_forged", "session_id": session["session_id"]}
        forged = sign_webhook_payload(json.dumps(event).encode("utf-8"), "not-the-secret")

        response = await _post_webhook(client, event, signature=forged)

        assert response.status_code == 400
        assert await self._status(client, session) == "PENDING"

        accepted = await _post_webhook(client, event)
        assert accepted.json()["data"]["order_status"] == "COMPLETED"

    @pytest.mark.asyncio
    async def test_secret_not_configured(self, client: AsyncClient, api_seed, monkeypatch):
        session = await self._open_session(client, api_seed)
        event = {"event_id": "evt_nosecret", "session_id": session["session_id"]}
        signature = sign_webhook_payload(json.dumps(event).encode("utf-8"), "whsec_test")
        monkeypatch.setattr(settings, "PAYMENT_WEBHOOK_SECRET", None)

        response = await _post_webhook(client, event, signature=signature)

        assert response.status_code == 503
        assert await self._status(client, session) == "PENDING"

    @pytest.mark.asyncio
    async def test_balance_order_rejected(self, client: AsyncClient, api_seed):
        user_id = await api_seed.user(balance="0.00")
        product_id = await api_seed.product(price="40.00")
        created = await client.post(
            "/api/v1/orders",
            json={
                "items": [{"product_id": product_id, "quantity": 1}],
                "payment_method": "BALANCE",
            },
            headers=_as_user(user_id),
        )
        order_id = created.json()["data"]["id"]

        response = await _post_webhook(client, {"event_id": "evt_balance", "order_id": order_id})

        assert response.status_code == 400
        order = await client.get(f"/api/v1/orders/{order_id}", headers=_as_user(user_id))
        assert order.json()["data"]["status"] == "PENDING"
