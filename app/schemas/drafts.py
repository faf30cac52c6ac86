"""
Form draft schemas.
"""

from typing import Dict, Union

from pydantic import Field

from app.schemas.common.base import BaseSchema

__all__ = ["DraftValue", "FormDraft", "FormDraftUpdate"]

DraftValue = Union[str, int, float, bool, None]


class FormDraftUpdate(BaseSchema):
    """Partially filled form to keep for later."""

    data: Dict[str, DraftValue] = Field(default_factory=dict)


class FormDraft(BaseSchema):
    """A stored draft as returned to the client."""

    form_id: str = Field(..., alias="formId")
    data: Dict[str, DraftValue] = Field(default_factory=dict)
    timestamp: int = Field(..., description="Save time in epoch milliseconds")
    last_saved: str = Field(default="", alias="lastSaved", description="Relative save time")
