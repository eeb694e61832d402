# ==============================================================================
# LICENSE SCHEMAS
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from licensestore.domain_models.license import LicenseStatus
from licensestore.schemas.base import TimestampSchema


class LicenseResponse(TimestampSchema):
    """Issued license as returned to its owner."""

    id: str
    license_key: str = Field(..., description="XXXX-XXXX-XXXX-XXXX")
    user_id: str
    product_id: str
    order_id: Optional[str] = None
    status: LicenseStatus
    ip_whitelist: Optional[List[str]] = None
    max_ips: int = 1
    expires_at: Optional[datetime] = None
