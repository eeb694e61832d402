"""Shared helpers."""

from licensestore.utils.helpers import (
    as_utc,
    generate_reference_id,
    round_money,
    round_whole,
    to_decimal,
    utc_now,
)

__all__ = [
    "as_utc",
    "generate_reference_id",
    "round_money",
    "round_whole",
    "to_decimal",
    "utc_now",
]
