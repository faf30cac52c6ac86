"""
Filter configuration and saved preset schemas.

Field aliases follow the browser wire format (``dateFrom``/``dateTo``);
presets are persisted with aliases so stored entries stay readable by the
web client.
"""

from typing import Dict, List, Union

from pydantic import ConfigDict, Field, field_validator

from app.schemas.common.base import BaseCreateSchema, BaseFilterSchema, BaseSchema

__all__ = [
    "ALL",
    "FilterConfig",
    "FilterPreset",
    "FilterPresetCreate",
    "FilterPresetList",
]

# Sentinel meaning "no constraint on this field"
ALL = "all"


class FilterConfig(BaseFilterSchema):
    """
    Advanced filter for record lists.

    Every field is optional; a missing value or ``"all"`` leaves the field
    unconstrained. ``date_from`` after ``date_to`` is accepted and simply
    matches nothing.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    status: Union[str, None] = Field(
        default=None,
        description="Status to match",
    )
    category: Union[str, None] = Field(
        default=None,
        description="Record type to match",
    )
    priority: Union[str, None] = Field(
        default=None,
        description="Priority to match",
    )
    date_from: Union[str, None] = Field(
        default=None,
        alias="dateFrom",
        description="Earliest creation date (ISO date or datetime, inclusive)",
    )
    date_to: Union[str, None] = Field(
        default=None,
        alias="dateTo",
        description="Latest creation date (ISO date or datetime, inclusive)",
    )

    @field_validator("status", "category", "priority", "date_from", "date_to")
    @classmethod
    def blank_to_none(cls, v: Union[str, None]) -> Union[str, None]:
        """Treat empty strings like a missing value."""
        if v is not None and not v.strip():
            return None
        return v

    def constraint(self, name: str) -> Union[str, None]:
        """Value of a field, or None when it does not constrain anything."""
        value = getattr(self, name)
        if value is None or value == ALL:
            return None
        return value

    def to_storage(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class FilterPresetCreate(BaseCreateSchema):
    """Request body for saving the current filter under a name."""

    name: str = Field(..., max_length=100, description="Preset name")
    filters: FilterConfig = Field(default_factory=FilterConfig)


class FilterPreset(BaseSchema):
    """Named filter configuration persisted per storage key."""

    id: str = Field(..., description="Millisecond timestamp identifier")
    name: str = Field(..., description="Preset name")
    filters: FilterConfig = Field(default_factory=FilterConfig)

    def to_storage(self) -> Dict[str, object]:
        return {"id": self.id, "name": self.name, "filters": self.filters.to_storage()}


class FilterPresetList(BaseSchema):
    storage_key: str
    presets: List[FilterPreset] = Field(default_factory=list)
