# ==============================================================================
# USER SCHEMAS
# ==============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field

from licensestore.schemas.base import BaseSchema


class UserSnapshot(BaseSchema):
    """Account state read inside a transaction, handed to notification sinks."""

    id: str
    username: str
    email: Optional[str] = None
    balance: Decimal = Field(default=Decimal("0.00"))
    points: int = 0
