# ==============================================================================
# CUSTOM EXCEPTIONS - Application Error Hierarchy
# ==============================================================================
# Structured exception classes for consistent error handling
# Each exception maps to an HTTP status code at the API boundary
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        status_code: HTTP status code to return
        details: Additional context dictionary
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format for JSON response.

        Returns:
            Dictionary containing error details
        """
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}', "
            f"status_code={self.status_code})"
        )


# ==============================================================================
# DATABASE EXCEPTIONS
# ==============================================================================

class DatabaseError(AppException):
    """
    Base exception for store failures (connection, query execution).

    These are infrastructure errors, never business-rule outcomes.
    """

    def __init__(
        self,
        message: str = "Database operation failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            status_code=503,
            details=details,
        )


class TransactionError(DatabaseError):
    """
    Raised when a transaction could not be committed and was rolled back.
    """

    def __init__(
        self,
        message: str = "Transaction failed",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, details=details)
        self.error_code = "TRANSACTION_ERROR"
        self.status_code = 500


# ==============================================================================
# RESOURCE EXCEPTIONS
# ==============================================================================

class NotFoundError(AppException):
    """
    Raised when a requested order, user, product or promo code does not exist.

    Maps to HTTP 404 Not Found.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ) -> None:
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = str(resource_id)

        super().__init__(
            message=message,
            error_code="NOT_FOUND",
            status_code=404,
            details=details,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ==============================================================================
# VALIDATION EXCEPTIONS
# ==============================================================================

class ValidationError(AppException):
    """
    Raised when input is malformed (empty cart, non-positive quantity).

    Maps to HTTP 422 Unprocessable Entity.
    """

    def __init__(
        self,
        message: str = "Validation error",
        errors: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=422,
            details={"validation_errors": errors or {}},
        )
        self.errors = errors or {}


class BadRequestError(AppException):
    """
    Raised when a business precondition is not met.

    Zero-row results from guarded updates are reported through this class
    (or one of its subclasses) with an order-scoped message.

    Maps to HTTP 400 Bad Request.
    """

    def __init__(
        self,
        message: str = "Bad request",
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "BAD_REQUEST",
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=400,
            details=details,
        )


# ==============================================================================
# BUSINESS LOGIC EXCEPTIONS
# ==============================================================================

class InsufficientStockError(BadRequestError):
    """Raised when a tracked product cannot cover the requested quantity."""

    def __init__(
        self,
        product_name: str,
        product_id: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {"product": product_name}
        if product_id:
            details["product_id"] = product_id
        super().__init__(
            message=f"Insufficient stock for {product_name}",
            details=details,
            error_code="INSUFFICIENT_STOCK",
        )
        self.product_name = product_name


class InsufficientFundsError(BadRequestError):
    """
    Raised when an account balance cannot cover an order total.
    """

    def __init__(
        self,
        message: str = "Insufficient balance",
        required_amount: Optional[float] = None,
    ) -> None:
        details = {}
        if required_amount is not None:
            details["required_amount"] = required_amount

        super().__init__(
            message=message,
            details=details,
            error_code="INSUFFICIENT_FUNDS",
        )


class PromoCodeRejectedError(BadRequestError):
    """
    Raised when a promo code fails one of its redemption rules.

    Attributes:
        reason: Short machine-readable rule name (expired, exhausted, ...)
    """

    def __init__(
        self,
        message: str,
        reason: str,
    ) -> None:
        super().__init__(
            message=message,
            details={"reason": reason},
            error_code="PROMO_CODE_REJECTED",
        )
        self.reason = reason


class ServiceUnavailableError(AppException):
    """
    Raised when an external service (payment gateway) is unavailable.

    Maps to HTTP 503 Service Unavailable.
    """

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        service_name: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> None:
        details = {}
        if service_name:
            details["service"] = service_name
        if retry_after:
            details["retry_after_seconds"] = retry_after

        super().__init__(
            message=message,
            error_code="SERVICE_UNAVAILABLE",
            status_code=503,
            details=details,
        )
