# ==============================================================================
# BASE SCHEMAS - Shared Response Shapes
# ==============================================================================
# ORM-readable base model, the success envelope and the health payload
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class BaseSchema(BaseModel):
    """
    Reads straight from ORM rows; enum fields serialize as their str values.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class TimestampSchema(BaseSchema):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class APIResponse(BaseModel, Generic[T]):
    """
    Envelope for successful calls.

    Failures never use it; the exception handlers in ``main`` emit
    ``{"success": false, "error": {...}}`` instead.
    """

    success: bool = True
    message: Optional[str] = Field(None, description="Human-readable outcome")
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: T, message: Optional[str] = None) -> "APIResponse[T]":
        return cls(success=True, data=data, message=message)


class HealthResponse(BaseSchema):
    status: str = Field(..., description="healthy or degraded")
    version: str
    database: str = Field(..., description="connected or disconnected")
