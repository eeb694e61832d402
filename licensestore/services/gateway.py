# ==============================================================================
# PAYMENT GATEWAY - External Checkout Interface
# ==============================================================================
# Opaque create-session / retrieve-session contract and an in-memory
# sandbox implementation for development and tests
# ==============================================================================

from __future__ import annotations

import hashlib
import hmac
import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol, runtime_checkable
from uuid import uuid4

from pydantic import Field

from licensestore.core.settings import settings
from licensestore.schemas.base import BaseSchema

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Raised by gateway implementations when the provider call fails."""


class GatewaySession(BaseSchema):
    """Checkout session created at the provider."""

    session_id: str
    url: Optional[str] = None


class GatewaySessionStatus(BaseSchema):
    """Provider view of a checkout session."""

    session_id: str
    paid: bool = False
    amount: Optional[Decimal] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class PaymentGateway(Protocol):
    async def create_session(
        self,
        amount: Decimal,
        metadata: Dict[str, Any],
    ) -> GatewaySession:
        ...

    async def retrieve_session(self, session_id: str) -> GatewaySessionStatus:
        ...


class SandboxPaymentGateway:
    """
    In-memory gateway.

    Sessions start unpaid; ``mark_paid`` simulates the customer finishing
    checkout. Setting ``available`` to False makes every call fail.
    """

    def __init__(
        self,
        currency: Optional[str] = None,
        success_url: Optional[str] = None,
    ) -> None:
        self.currency = currency or settings.CURRENCY
        self.success_url = success_url or settings.CHECKOUT_SUCCESS_URL
        self.available = True
        self._sessions: Dict[str, GatewaySessionStatus] = {}

    def _ensure_available(self) -> None:
        if not self.available:
            raise PaymentGatewayError("sandbox gateway unavailable")

    async def create_session(
        self,
        amount: Decimal,
        metadata: Dict[str, Any],
    ) -> GatewaySession:
        self._ensure_available()
        session_id = f"cs_test_{uuid4().hex}"
        self._sessions[session_id] = GatewaySessionStatus(
            session_id=session_id,
            amount=amount,
            metadata=dict(metadata),
        )
        logger.debug(f"Sandbox session {session_id} created for {amount} {self.currency}")
        return GatewaySession(
            session_id=session_id,
            url=self.success_url.replace("{SESSION_ID}", session_id),
        )

    async def retrieve_session(self, session_id: str) -> GatewaySessionStatus:
        self._ensure_available()
        status = self._sessions.get(session_id)
        if status is None:
            raise PaymentGatewayError(f"unknown session {session_id}")
        return status.model_copy()

    def mark_paid(self, session_id: str) -> None:
        self._sessions[session_id].paid = True


def create_payment_gateway(name: Optional[str] = None) -> PaymentGateway:
    """
    Build the gateway selected by ``PAYMENT_GATEWAY``.

    Raises:
        ValueError: If the gateway name is not supported
    """
    name = (name or settings.PAYMENT_GATEWAY).lower()
    if name == "sandbox":
        return SandboxPaymentGateway()
    raise ValueError(f"Unsupported payment gateway: {name}")


def sign_webhook_payload(payload: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of a raw webhook body."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_webhook_signature(payload: bytes, signature: str, secret: str) -> bool:
    """Constant-time check of a webhook signature against the raw body."""
    expected = sign_webhook_payload(payload, secret)
    return hmac.compare_digest(expected, signature.strip().lower())
