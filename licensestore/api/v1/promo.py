# ==============================================================================
# PROMO ENDPOINTS - Promo Code Preview
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter

from licensestore.api.dependencies import CurrentUserID, PromoServiceDep
from licensestore.schemas.base import APIResponse
from licensestore.schemas.promo import PromoPreview, PromoPreviewRequest

router = APIRouter(prefix="/promo", tags=["Promo Codes"])


@router.post(
    "/preview",
    response_model=APIResponse[PromoPreview],
    summary="Preview promo code",
    description="Check a promo code against a cart total. Nothing is reserved.",
)
async def preview_promo(
    schema: PromoPreviewRequest,
    user_id: CurrentUserID,
    service: PromoServiceDep,
) -> APIResponse[PromoPreview]:
    preview = await service.preview(schema.code, schema.cart_total, user_id)
    return APIResponse.ok(data=preview, message=preview.message)
