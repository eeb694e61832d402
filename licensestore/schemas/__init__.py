# ==============================================================================
# SCHEMAS PACKAGE
# ==============================================================================

from licensestore.schemas.base import APIResponse, BaseSchema, HealthResponse, TimestampSchema
from licensestore.schemas.checkout import (
    BalancePaymentResult,
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    PaymentWebhookEvent,
    VerifyPaymentResponse,
    WebhookAck,
)
from licensestore.schemas.license import LicenseResponse
from licensestore.schemas.order import (
    CartLineReport,
    CartValidationResponse,
    OrderCreate,
    OrderItemCreate,
    OrderItemResponse,
    OrderResponse,
    ProductSummary,
)
from licensestore.schemas.promo import PromoPreview, PromoPreviewRequest
from licensestore.schemas.tier import TierInfo, TierProgress
from licensestore.schemas.user import UserSnapshot

__all__ = [
    "APIResponse",
    "BaseSchema",
    "HealthResponse",
    "TimestampSchema",
    "BalancePaymentResult",
    "CheckoutSessionRequest",
    "CheckoutSessionResponse",
    "PaymentWebhookEvent",
    "VerifyPaymentResponse",
    "WebhookAck",
    "LicenseResponse",
    "CartLineReport",
    "CartValidationResponse",
    "OrderCreate",
    "OrderItemCreate",
    "OrderItemResponse",
    "OrderResponse",
    "ProductSummary",
    "PromoPreview",
    "PromoPreviewRequest",
    "TierInfo",
    "TierProgress",
    "UserSnapshot",
]
