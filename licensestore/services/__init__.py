# ==============================================================================
# SERVICES PACKAGE
# ==============================================================================

"""
Business Services
=================

- TierService: loyalty tier discounts
- PromoCodeService: promo preview, reservation and redemption
- LicenseService: license key generation and issuance
- OrderService: order builder, queries and cancellation
- OrderCompletionService: exactly-once completion
- BalancePaymentService: balance payments
- CheckoutService: gateway sessions and payment confirmation
"""

from licensestore.services.balance_service import BalancePaymentService
from licensestore.services.checkout_service import CheckoutService
from licensestore.services.completion_service import OrderCompletionService
from licensestore.services.gateway import (
    PaymentGateway,
    PaymentGatewayError,
    SandboxPaymentGateway,
    create_payment_gateway,
)
from licensestore.services.license_service import (
    LicenseService,
    generate_license_key,
    validate_license_key_format,
)
from licensestore.services.notification_service import (
    LoggingNotificationSink,
    NotificationSink,
    PostCommitDispatcher,
)
from licensestore.services.order_service import OrderService
from licensestore.services.promo_service import PromoCodeService, compute_discount
from licensestore.services.tier_service import DEFAULT_TIERS, TierService

__all__ = [
    "BalancePaymentService",
    "CheckoutService",
    "OrderCompletionService",
    "PaymentGateway",
    "PaymentGatewayError",
    "SandboxPaymentGateway",
    "create_payment_gateway",
    "LicenseService",
    "generate_license_key",
    "validate_license_key_format",
    "LoggingNotificationSink",
    "NotificationSink",
    "PostCommitDispatcher",
    "OrderService",
    "PromoCodeService",
    "compute_discount",
    "DEFAULT_TIERS",
    "TierService",
]
