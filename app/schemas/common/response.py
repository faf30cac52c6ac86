# --- File: app/schemas/common/response.py ---
"""
Standard API response wrappers.
"""

from typing import Any, Dict, Generic, Union, TypeVar

from pydantic import Field

from app.schemas.common.base import BaseSchema

T = TypeVar("T")

__all__ = [
    "SuccessResponse",
    "MessageResponse",
    "ErrorBody",
    "ErrorResponse",
]


class SuccessResponse(BaseSchema, Generic[T]):
    """Standard success response."""

    success: bool = Field(default=True, description="Success flag")
    message: str = Field(..., description="Response message")
    data: Union[T, None] = Field(default=None, description="Response data")

    @classmethod
    def create(
        cls,
        message: str,
        data: Union[T, None] = None,
    ):
        """Create success response."""
        return cls(success=True, message=message, data=data)


class MessageResponse(BaseSchema):
    """Simple message response."""

    message: str = Field(..., description="Response message")


class ErrorBody(BaseSchema):
    """Body of an application error, as produced by ``BaseAppException.to_dict``."""

    message: str = Field(..., description="Error message")
    code: str = Field(..., description="Application error code")
    details: Dict[str, Any] = Field(default_factory=dict, description="Extra context")
    type: str = Field(..., description="Exception class name")


class ErrorResponse(BaseSchema):
    """Standard error response."""

    error: ErrorBody
