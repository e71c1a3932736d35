"""Issue record as stored in the civicIssues slot, and submission input."""

from datetime import UTC, datetime
from typing import Optional

from pydantic import BaseModel, Field

STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in-progress"
STATUS_RESOLVED = "resolved"

STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_RESOLVED)
PRIORITIES = ("low", "medium", "high")
ISSUE_TYPES = ("pothole", "streetlight", "garbage", "water")


def iso_timestamp(moment: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision and a Z suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Issue(BaseModel):
    """Single reported civic problem.

    Field names match the serialized form exactly (id, type, description,
    location, priority, status, date, photo), so data written by older
    clients loads as-is.
    """

    id: str = Field(..., description="Unique id, epoch milliseconds at creation")
    type: str = Field(..., description="Issue kind, e.g. pothole or streetlight")
    description: str = Field(..., description="Free-form description")
    location: str = Field(..., description="Free-form location")
    priority: str = Field(..., description="low, medium or high")
    status: str = Field(default=STATUS_PENDING, description="pending, in-progress or resolved")
    date: str = Field(..., description="Creation time, ISO-8601")
    photo: Optional[str] = Field(default=None, description="Photo URL or session-local reference")

    model_config = {"extra": "ignore"}


class IssueInput(BaseModel):
    """Fields supplied by the report form. Nothing is validated beyond types."""

    type: str = ""
    description: str = ""
    location: str = ""
    priority: str = ""
    photo: Optional[str] = None
