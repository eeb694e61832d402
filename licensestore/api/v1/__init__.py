# ==============================================================================
# API V1 PACKAGE
# ==============================================================================

from licensestore.api.v1.checkout import router as checkout_router
from licensestore.api.v1.orders import router as orders_router
from licensestore.api.v1.promo import router as promo_router
from licensestore.api.v1.webhooks import router as webhooks_router

__all__ = [
    "checkout_router",
    "orders_router",
    "promo_router",
    "webhooks_router",
]
