# ==============================================================================
# CHECKOUT SCHEMAS - Payment Flows
# ==============================================================================
# Gateway checkout sessions, balance payments and webhook confirmation
# ==============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from licensestore.schemas.base import BaseSchema
from licensestore.schemas.order import OrderItemCreate, OrderResponse


class CheckoutSessionRequest(BaseSchema):
    """Schema for starting an external gateway checkout."""

    items: List[OrderItemCreate] = Field(..., min_length=1)
    promo_code: Optional[str] = Field(None, max_length=50)


class CheckoutSessionResponse(BaseSchema):
    """Gateway session created for a PENDING order."""

    order_id: str
    session_id: str
    url: Optional[str] = None
    total: Decimal


class BalancePaymentResult(BaseSchema):
    """Outcome of paying an order from the account balance."""

    success: bool
    order_id: str
    order: OrderResponse


class VerifyPaymentResponse(BaseSchema):
    """Outcome of polling the gateway for an order."""

    status: str = Field(..., description="completed, pending or cancelled")
    order_id: str
    order: Optional[OrderResponse] = None


class PaymentWebhookEvent(BaseSchema):
    """
    Gateway callback payload, accepted once its signature checks out.

    Either ``session_id`` or ``order_id`` identifies the order.
    """

    event_id: str = Field(..., min_length=1, max_length=255)
    type: str = Field("checkout.session.completed", max_length=100)
    session_id: Optional[str] = None
    order_id: Optional[str] = None
    paid: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def require_reference(self) -> "PaymentWebhookEvent":
        if not self.session_id and not self.order_id and not self.metadata.get("order_id"):
            raise ValueError("session_id or order_id is required")
        return self


class WebhookAck(BaseSchema):
    """Acknowledgement returned to the gateway."""

    received: bool = True
    duplicate: bool = False
    order_status: Optional[str] = None
