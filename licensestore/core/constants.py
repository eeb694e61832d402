# ==============================================================================
# APPLICATION CONSTANTS - Centralized Configuration Values
# ==============================================================================
# Immutable constants used throughout the application
# Organized by category for easy maintenance
# ==============================================================================

from __future__ import annotations

import string
from typing import Final


# ==============================================================================
# API CONSTANTS
# ==============================================================================

class APIConstants:
    """API-related constants."""

    USER_ID_HEADER: Final[str] = "X-User-ID"
    REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
    RESPONSE_TIME_HEADER: Final[str] = "X-Response-Time"
    WEBHOOK_SIGNATURE_HEADER: Final[str] = "X-Webhook-Signature"


# ==============================================================================
# LICENSE CONSTANTS
# ==============================================================================

class LicenseConstants:
    """License key format: XXXX-XXXX-XXXX-XXXX over [0-9A-Z]."""

    KEY_GROUPS: Final[int] = 4
    GROUP_LENGTH: Final[int] = 4
    SEPARATOR: Final[str] = "-"
    ALPHABET: Final[str] = string.digits + string.ascii_uppercase
    KEY_PATTERN: Final[str] = r"^[0-9A-Z]{4}-[0-9A-Z]{4}-[0-9A-Z]{4}-[0-9A-Z]{4}$"
    DEFAULT_MAX_IPS: Final[int] = 1


# ==============================================================================
# PRODUCT CONSTANTS
# ==============================================================================

class ProductConstants:
    """Product-related constants."""

    UNLIMITED_STOCK: Final[int] = -1


# ==============================================================================
# TRANSACTION CONSTANTS
# ==============================================================================

class TransactionConstants:
    """Ledger-related constants."""

    REFERENCE_PREFIX: Final[str] = "TXN"
    REFERENCE_LENGTH: Final[int] = 12


# ==============================================================================
# ERROR MESSAGES
# ==============================================================================

class ErrorMessages:
    """Business-rule messages surfaced to callers."""

    # Orders
    ORDER_NOT_FOUND: Final[str] = "Order not found"
    ORDER_EMPTY: Final[str] = "No valid products in order"
    ORDER_FORBIDDEN: Final[str] = "Unauthorized access to order"
    ORDER_ALREADY_PROCESSING: Final[str] = "Order is already being processed or completed"
    ORDER_NOT_CANCELLABLE: Final[str] = "Order was already processed or cancelled"
    ORDER_NOT_BALANCE: Final[str] = "Order payment method is not balance"
    ORDER_NOT_EXTERNAL: Final[str] = "Order is not paid through the payment gateway"
    INVALID_PAYMENT_METHOD: Final[str] = "Unknown payment method: {method}"
    PRODUCTS_NOT_FOUND: Final[str] = "Some products not found: {ids}"

    # Users
    USER_NOT_FOUND: Final[str] = "User not found"
    USER_BANNED: Final[str] = "Account is suspended"
    INSUFFICIENT_BALANCE: Final[str] = "Insufficient balance"

    # Promo codes
    PROMO_NOT_FOUND: Final[str] = "Promo code not found"
    PROMO_INACTIVE: Final[str] = "Promo code is not active"
    PROMO_EXPIRED: Final[str] = "Promo code has expired"
    PROMO_EXHAUSTED: Final[str] = "Promo code usage limit reached"
    PROMO_ALREADY_USED: Final[str] = "You have already used this promo code"
    PROMO_MIN_PURCHASE: Final[str] = "Minimum purchase amount is {amount}"

    # Checkout
    NO_PAYMENT_REFERENCE: Final[str] = "No payment reference found for order"
    GATEWAY_UNAVAILABLE: Final[str] = "Payment gateway error: {error}"
    PAYMENT_REFERENCE_MISMATCH: Final[str] = "Payment session does not belong to order"
    WEBHOOK_SIGNATURE_MISSING: Final[str] = "No webhook signature provided"
    WEBHOOK_SIGNATURE_INVALID: Final[str] = "Webhook signature verification failed"
    WEBHOOK_SECRET_MISSING: Final[str] = "Webhook secret is not configured"


# ==============================================================================
# NOTIFICATION TEXT
# ==============================================================================

class NotificationText:
    """Titles and templates for in-app notification rows."""

    POINTS_TITLE: Final[str] = "New reward points!"
    POINTS_MESSAGE: Final[str] = "You earned {points:,} points from order #{order_ref}"
    ORDER_TITLE: Final[str] = "Order Completed"
    ORDER_MESSAGE: Final[str] = "Your order for {product_name} has been completed."
