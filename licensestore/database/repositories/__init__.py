# ==============================================================================
# REPOSITORIES PACKAGE
# ==============================================================================

from licensestore.database.repositories.base_repository import BaseRepository
from licensestore.database.repositories.license_repository import LicenseRepository
from licensestore.database.repositories.notification_repository import NotificationRepository
from licensestore.database.repositories.order_repository import OrderRepository
from licensestore.database.repositories.product_repository import ProductRepository
from licensestore.database.repositories.promo_code_repository import PromoCodeRepository
from licensestore.database.repositories.transaction_repository import TransactionRepository
from licensestore.database.repositories.user_repository import UserRepository
from licensestore.database.repositories.webhook_event_repository import WebhookEventRepository

__all__ = [
    "BaseRepository",
    "LicenseRepository",
    "NotificationRepository",
    "OrderRepository",
    "ProductRepository",
    "PromoCodeRepository",
    "TransactionRepository",
    "UserRepository",
    "WebhookEventRepository",
]
