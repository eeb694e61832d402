# ==============================================================================
# MAIN API ROUTER - Route Aggregation
# ==============================================================================
# Combines all API version routers
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter

from licensestore.core.settings import settings
from licensestore.api.v1 import (
    checkout_router,
    orders_router,
    promo_router,
    webhooks_router,
)

# Create main API router
api_router = APIRouter()

# Include v1 routers with API prefix
api_router.include_router(orders_router, prefix=settings.API_V1_PREFIX)
api_router.include_router(promo_router, prefix=settings.API_V1_PREFIX)
api_router.include_router(checkout_router, prefix=settings.API_V1_PREFIX)
api_router.include_router(webhooks_router, prefix=settings.API_V1_PREFIX)
