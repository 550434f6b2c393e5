"""
Pydantic models for municipal wards.
"""

from pydantic import Field
from datetime import datetime
from typing import List, Optional

from wardwatch.models.base import CamelModel
from wardwatch.models.problem import ProblemResponse, StatusCount

MIN_WARD_NUMBER = 1
MAX_WARD_NUMBER = 50


class Representative(CamelModel):
    name: Optional[str] = Field(None, max_length=100)
    contact: Optional[str] = Field(None, max_length=50)

    class Config:
        str_strip_whitespace = True


class WardCreate(CamelModel):
    """Body of POST /wards (admin only)."""
    ward_number: int = Field(..., ge=MIN_WARD_NUMBER, le=MAX_WARD_NUMBER)
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    population: int = Field(0, ge=0)
    area: Optional[str] = Field(None, max_length=100)
    representative: Representative = Field(default_factory=Representative)

    class Config:
        str_strip_whitespace = True
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "wardNumber": 11,
                "name": "Ward 11",
                "description": "Riverside colony and market",
                "population": 1200,
                "area": "3 sq km",
                "representative": {"name": "S. Patil", "contact": "+919812345678"},
            }
        }


class WardUpdate(CamelModel):
    """
    Body of PUT /wards/{n}. Every field is optional; only the ones sent are applied.
    The ward number itself is the identity and cannot be patched.
    """
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    population: Optional[int] = Field(None, ge=0)
    area: Optional[str] = Field(None, max_length=100)
    representative: Optional[Representative] = None
    is_active: Optional[bool] = None

    class Config:
        str_strip_whitespace = True
        extra = "ignore"


class WardResponse(CamelModel):
    ward_number: int
    name: str
    description: Optional[str] = None
    population: int = 0
    area: Optional[str] = None
    representative: Representative = Field(default_factory=Representative)
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Derived at read time from the problems collection
    active_problems: Optional[int] = None
    total_problems: Optional[int] = None


class WardEnvelope(CamelModel):
    message: Optional[str] = None
    ward: WardResponse


class WardListResponse(CamelModel):
    wards: List[WardResponse]


class WardDetailResponse(CamelModel):
    ward: WardResponse
    recent_problems: List[ProblemResponse]
    stats: List[StatusCount]
