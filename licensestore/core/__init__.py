# ==============================================================================
# CORE PACKAGE INITIALIZATION
# ==============================================================================

"""
Core Module
===========

Settings, exception hierarchy, constants and logging setup.
"""

from licensestore.core.settings import settings, get_settings, Settings, DatabaseType
from licensestore.core.exceptions import (
    AppException,
    BadRequestError,
    DatabaseError,
    InsufficientFundsError,
    InsufficientStockError,
    NotFoundError,
    PromoCodeRejectedError,
    ServiceUnavailableError,
    TransactionError,
    ValidationError,
)

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "DatabaseType",
    "AppException",
    "BadRequestError",
    "DatabaseError",
    "InsufficientFundsError",
    "InsufficientStockError",
    "NotFoundError",
    "PromoCodeRejectedError",
    "ServiceUnavailableError",
    "TransactionError",
    "ValidationError",
]
