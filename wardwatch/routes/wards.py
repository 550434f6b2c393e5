"""
Ward endpoints - reference data for the municipal subdivisions.

Reads are open to any authenticated user; create/update/deactivate are
admin only. Problem counts on each ward are computed at read time.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from wardwatch.core.errors import AccessDenied
from wardwatch.models.problem import ProblemCategory, ProblemListResponse, ProblemStatus
from wardwatch.models.user import Actor
from wardwatch.models.ward import (
    MAX_WARD_NUMBER,
    MIN_WARD_NUMBER,
    WardCreate,
    WardDetailResponse,
    WardEnvelope,
    WardListResponse,
    WardUpdate,
)
from wardwatch.routes.deps import get_current_actor, require_admin
from wardwatch.routes.presenters import with_people
from wardwatch.services.access_policy import can_view
from wardwatch.services.problem_service import ProblemService, get_problem_service
from wardwatch.services.user_service import UserService, get_user_service
from wardwatch.services.ward_service import WardService, get_ward_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wards", tags=["Wards"])

WardNumber = Annotated[int, Path(ge=MIN_WARD_NUMBER, le=MAX_WARD_NUMBER, description="Ward number")]


@router.get("", response_model=WardListResponse)
async def list_wards(
    actor: Actor = Depends(get_current_actor),
    wards: WardService = Depends(get_ward_service),
):
    """All active wards with activeProblems / totalProblems."""
    return {"wards": await wards.list_wards()}


@router.get("/{ward_number}", response_model=WardDetailResponse)
async def get_ward(
    ward_number: WardNumber,
    actor: Actor = Depends(get_current_actor),
    wards: WardService = Depends(get_ward_service),
    problems: ProblemService = Depends(get_problem_service),
    users: UserService = Depends(get_user_service),
):
    """Ward detail, its five most recent problems and a status breakdown."""
    ward = await wards.get_ward(ward_number)
    recent = await problems.recent_problems(ward_number, limit=5)
    stats = await problems.status_counts(ward_number)

    return {
        "ward": ward,
        "recent_problems": await with_people(recent, users),
        "stats": stats,
    }


@router.post("", status_code=status.HTTP_201_CREATED, response_model=WardEnvelope)
async def create_ward(
    body: WardCreate,
    admin: Actor = Depends(require_admin),
    wards: WardService = Depends(get_ward_service),
):
    """Create a ward. A ward number that already exists is rejected with 400."""
    ward = await wards.create_ward(body.model_dump())
    logger.info(f"Ward {ward['ward_number']} created by admin {admin.id}")
    return {"message": "Ward created successfully", "ward": ward}


@router.put("/{ward_number}", response_model=WardEnvelope)
async def update_ward(
    body: WardUpdate,
    ward_number: WardNumber,
    admin: Actor = Depends(require_admin),
    wards: WardService = Depends(get_ward_service),
):
    """Partial update: only fields present in the body are changed."""
    ward = await wards.update_ward(ward_number, body.model_dump(exclude_unset=True))
    return {"message": "Ward updated successfully", "ward": ward}


@router.delete("/{ward_number}", response_model=WardEnvelope)
async def deactivate_ward(
    ward_number: WardNumber,
    admin: Actor = Depends(require_admin),
    wards: WardService = Depends(get_ward_service),
):
    """Soft delete: the ward disappears from listings but its problems stay."""
    ward = await wards.deactivate_ward(ward_number)
    return {"message": "Ward deactivated successfully", "ward": ward}


@router.get("/{ward_number}/problems", response_model=ProblemListResponse)
async def list_ward_problems(
    ward_number: WardNumber,
    status_filter: Optional[ProblemStatus] = Query(None, alias="status"),
    category: Optional[ProblemCategory] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    problems: ProblemService = Depends(get_problem_service),
    users: UserService = Depends(get_user_service),
):
    """
    Problems of one ward. Unlike GET /problems this fails closed: a resident
    asking for another ward gets 403, never data.
    """
    if not can_view(actor, ward_number):
        logger.warning(f"User {actor.id} (ward {actor.ward_number}) denied ward {ward_number} problems")
        raise AccessDenied()

    result = await problems.list_problems(
        ward_number=ward_number,
        status=status_filter.value if status_filter else None,
        category=category.value if category else None,
        page=page,
        page_size=limit,
    )
    result["problems"] = await with_people(result["problems"], users)
    return result
