from app.schemas.common.base import (
    BaseSchema,
    BaseCreateSchema,
    BaseUpdateSchema,
    BaseFilterSchema,
)
from app.schemas.common.response import (
    SuccessResponse,
    MessageResponse,
    ErrorBody,
    ErrorResponse,
)

__all__ = [
    "BaseSchema",
    "BaseCreateSchema",
    "BaseUpdateSchema",
    "BaseFilterSchema",
    "SuccessResponse",
    "MessageResponse",
    "ErrorBody",
    "ErrorResponse",
]
