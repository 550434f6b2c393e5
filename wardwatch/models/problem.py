"""
Pydantic models for reported problems.
These models handle validation for problem submission, status updates and responses.
"""

from pydantic import Field
from datetime import datetime
from typing import Dict, List, Optional
from enum import Enum

from wardwatch.models.base import CamelModel


class ProblemCategory(str, Enum):
    WATER_SUPPLY = "Water Supply"
    ELECTRICITY = "Electricity"
    ROADS_TRANSPORTATION = "Roads & Transportation"
    WASTE_MANAGEMENT = "Waste Management"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    SECURITY = "Security"
    ENVIRONMENT = "Environment"
    INFRASTRUCTURE = "Infrastructure"
    OTHER = "Other"


class ProblemPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class ProblemStatus(str, Enum):
    """
    Problem lifecycle states.

    No transition order is enforced: an admin may move a problem from any
    state to any other, including Closed back to Open.
    """
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


# Statuses that stamp resolved_at when entered
RESOLVED_STATUSES = (ProblemStatus.RESOLVED.value, ProblemStatus.CLOSED.value)
# Statuses counted as "active" in ward summaries
ACTIVE_STATUSES = [ProblemStatus.OPEN.value, ProblemStatus.IN_PROGRESS.value]


class ProblemCreate(CamelModel):
    """
    Body of POST /problems.
    The ward is never taken from the body: it comes from the reporter's profile.
    """
    title: str = Field(..., min_length=5, max_length=200, description="Short summary of the problem")
    description: str = Field(..., min_length=10, max_length=1000, description="What the resident observed")
    category: ProblemCategory
    location: str = Field(..., min_length=5, description="Street, landmark or address")
    # null is accepted and stored as Medium
    priority: Optional[ProblemPriority] = ProblemPriority.MEDIUM
    images: List[str] = Field(default_factory=list, description="Image URLs")

    class Config:
        str_strip_whitespace = True
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "title": "Broken street light",
                "description": "The street light near the temple has been off for a week.",
                "category": "Electricity",
                "location": "Temple Road, near bus stop",
                "priority": "High",
                "images": ["https://example.com/photo.jpg"],
            }
        }


class StatusUpdateRequest(CamelModel):
    """Body of PUT /problems/{id}/status (admin only)."""
    status: ProblemStatus = Field(..., description="New status value")
    admin_notes: Optional[str] = Field(None, max_length=500, description="Optional admin note")
    assigned_to: Optional[str] = Field(None, description="User id to assign the problem to")

    class Config:
        str_strip_whitespace = True


class UserSummary(CamelModel):
    """Display-friendly reference to a user."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class ProblemResponse(CamelModel):
    id: str
    title: str
    description: str
    category: str
    location: str
    priority: str = ProblemPriority.MEDIUM.value
    status: str = ProblemStatus.OPEN.value
    ward_number: int
    reported_by: Optional[UserSummary] = None
    assigned_to: Optional[UserSummary] = None
    admin_notes: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    resolved_at: Optional[datetime] = None
    estimated_resolution_date: Optional[datetime] = None
    is_public: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProblemEnvelope(CamelModel):
    message: Optional[str] = None
    problem: ProblemResponse


class ProblemListResponse(CamelModel):
    problems: List[ProblemResponse]
    total_pages: int
    current_page: int
    total: int


class StatusCount(CamelModel):
    # "_id" keeps the aggregate shape existing dashboards consume
    id: Optional[str] = Field(None, alias="_id")
    count: int


class WardStat(CamelModel):
    id: int = Field(..., alias="_id")
    count: int
    open: int
    in_progress: int
    resolved: int


class StatsSummaryResponse(CamelModel):
    status_stats: List[StatusCount]
    category_stats: List[StatusCount]
    ward_stats: List[WardStat]


class ProblemEvent(CamelModel):
    """Payload of new-problem / problem-updated notifications."""
    id: str
    title: str
    ward_number: int
    status: Optional[str] = None


def problem_event_payload(problem: Dict, include_status: bool = False) -> Dict:
    """Build the JSON payload pushed to ward subscribers."""
    event = ProblemEvent(
        id=problem["id"],
        title=problem["title"],
        ward_number=problem["ward_number"],
        status=problem.get("status") if include_status else None,
    )
    return {
        "problem": event.model_dump(by_alias=True, exclude_none=True),
        "wardNumber": problem["ward_number"],
    }
