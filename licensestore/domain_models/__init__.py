# ==============================================================================
# DOMAIN MODELS PACKAGE
# ==============================================================================
# SQLAlchemy models; importing this package registers every table on
# SQLBase.metadata
# ==============================================================================

from licensestore.domain_models.base import CreatedAtMixin, SQLBase, TimestampMixin
from licensestore.domain_models.user import User
from licensestore.domain_models.product import Product
from licensestore.domain_models.promo_code import DiscountType, PromoCode, PromoCodeUsage
from licensestore.domain_models.order import (
    OPEN_ORDER_STATUSES,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
)
from licensestore.domain_models.license import License, LicenseStatus
from licensestore.domain_models.transaction import (
    Transaction,
    TransactionStatus,
    TransactionType,
)
from licensestore.domain_models.notification import Notification, NotificationType
from licensestore.domain_models.webhook_event import ProcessedWebhookEvent

__all__ = [
    "SQLBase",
    "TimestampMixin",
    "CreatedAtMixin",
    "User",
    "Product",
    "PromoCode",
    "PromoCodeUsage",
    "DiscountType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "OPEN_ORDER_STATUSES",
    "License",
    "LicenseStatus",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "Notification",
    "NotificationType",
    "ProcessedWebhookEvent",
]
