# ==============================================================================
# WEBHOOK ENDPOINTS - Gateway Callbacks
# ==============================================================================
# Every delivery must carry an HMAC-SHA256 signature of its raw body
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter, Depends

from licensestore.api.dependencies import CheckoutServiceDep, verify_webhook_request
from licensestore.schemas.base import APIResponse
from licensestore.schemas.checkout import PaymentWebhookEvent, WebhookAck

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post(
    "/payment",
    response_model=APIResponse[WebhookAck],
    summary="Payment gateway webhook",
    dependencies=[Depends(verify_webhook_request)],
)
async def payment_webhook(
    event: PaymentWebhookEvent,
    service: CheckoutServiceDep,
) -> APIResponse[WebhookAck]:
    ack = await service.handle_webhook(event)
    return APIResponse.ok(data=ack)
