# ==============================================================================
# HELPER UTILITIES
# ==============================================================================
# Common utility functions used across the application
# ==============================================================================

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional
from uuid import uuid4

CENT = Decimal("0.01")
WHOLE = Decimal("1")


def generate_reference_id(prefix: str = "REF", length: int = 8) -> str:
    """
    Generate a unique reference ID.

    Args:
        prefix: ID prefix (e.g., TXN, ORD)
        length: Length of random part

    Returns:
        Formatted reference ID (e.g., TXN-A1B2C3D4)
    """
    random_part = uuid4().hex[:length].upper()
    return f"{prefix}-{random_part}"


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a datetime read back from the store to an aware UTC value.

    SQLite returns naive datetimes even for timezone-aware columns.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_decimal(value: Any) -> Decimal:
    """Coerce numbers coming from the driver (float, int, str) to Decimal."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_whole(value: Decimal) -> Decimal:
    """Round to a whole currency unit, half-up."""
    return to_decimal(value).quantize(WHOLE, rounding=ROUND_HALF_UP)
