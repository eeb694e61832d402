# ==============================================================================
# LICENSESTORE PACKAGE INITIALIZATION
# ==============================================================================
# Digital license store backend: order pricing, exactly-once completion,
# balance payments and license issuance over an async relational store
# ==============================================================================

"""
License Store
=============

Order & payment completion engine for digital license keys.

Features:
---------
- Loyalty tier and promo-code discounts with admission control
- Exactly-once order completion via guarded conditional updates
- Balance payments composed with completion in one transaction
- License issuance (one key per purchased unit)
- Post-commit notification dispatch

Usage:
------
    uvicorn licensestore.main:app --reload
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
