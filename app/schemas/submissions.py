"""
Student submissions and warden actions forwarded to the hostel API.

Required-field checks live in ``app.utils.validators`` so that they
surface as field-scoped errors in the portal's own error format.
"""

from enum import Enum
from typing import Union

from pydantic import Field

from app.schemas.common.base import BaseCreateSchema, BaseUpdateSchema

__all__ = [
    "ComplaintCategory",
    "ApologyCategory",
    "Priority",
    "ComplaintCreate",
    "ApologyCreate",
    "StatusUpdate",
    "PriorityUpdate",
    "ApologyReview",
    "TimelineEntryCreate",
]


class ComplaintCategory(str, Enum):
    ROOMMATE = "roommate"
    CLEANLINESS = "cleanliness"
    PLUMBING = "plumbing"
    ELECTRICITY = "electricity"
    LOST_AND_FOUND = "Lost and Found"
    OTHER = "Other Issues"


class ApologyCategory(str, Enum):
    OUTING = "outing"
    MISCONDUCT = "misconduct"
    MISCELLANEOUS = "miscellaneous"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ComplaintCreate(BaseCreateSchema):
    """New complaint; attachments travel separately as multipart files."""

    title: str = Field(default="", max_length=200)
    type: str = Field(default="", description="Complaint category")
    description: str = Field(default="", max_length=5000)
    priority: Union[str, None] = Field(default=None)


class ApologyCreate(BaseCreateSchema):
    """New apology letter."""

    type: str = Field(default="", description="Apology category")
    message: str = Field(default="", max_length=5000)
    description: Union[str, None] = Field(default=None, max_length=5000)
    student_id: Union[str, None] = Field(default=None)


class StatusUpdate(BaseUpdateSchema):
    status: str


class PriorityUpdate(BaseUpdateSchema):
    priority: Priority


class ApologyReview(BaseUpdateSchema):
    status: str
    comment: Union[str, None] = Field(default=None, max_length=2000)


class TimelineEntryCreate(BaseCreateSchema):
    message: str = Field(default="", max_length=5000)
