"""
Problem endpoints - residents report problems, admins triage them.

Every mutating endpoint follows the same order:
authenticate -> validate body -> access check -> store write -> publish.
The publish only happens once the store write has returned, and a failed
publish never fails the request.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from wardwatch.core.errors import AccessDenied, ValidationFailed
from wardwatch.models.problem import (
    ProblemCategory,
    ProblemCreate,
    ProblemEnvelope,
    ProblemListResponse,
    ProblemStatus,
    StatsSummaryResponse,
    StatusUpdateRequest,
    problem_event_payload,
)
from wardwatch.models.user import Actor
from wardwatch.routes.deps import get_current_actor
from wardwatch.routes.presenters import present_problem, with_people
from wardwatch.services.access_policy import can_mutate_status, can_view, scope_ward_filter
from wardwatch.services.notification_bus import (
    NEW_PROBLEM,
    PROBLEM_UPDATED,
    NotificationBus,
    get_notification_bus,
    publish_best_effort,
)
from wardwatch.services.problem_service import ProblemService, get_problem_service
from wardwatch.services.user_service import UserService, get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/problems", tags=["Problems"])


def _parse_ward_filter(raw: Optional[str]) -> Optional[int]:
    """
    Admin-only wardNumber filter. Residents never reach this: their filter is
    discarded unparsed, so any value they send still yields their own ward.
    """
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationFailed([{"field": "wardNumber", "message": "Ward number must be an integer"}])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProblemEnvelope)
async def report_problem(
    body: ProblemCreate,
    actor: Actor = Depends(get_current_actor),
    problems: ProblemService = Depends(get_problem_service),
    users: UserService = Depends(get_user_service),
    bus: NotificationBus = Depends(get_notification_bus),
):
    """
    Report a new problem in the caller's own ward.

    The ward always comes from the reporter's profile; a wardNumber in the
    body is ignored. Subscribers of that ward receive a new-problem event.
    """
    logger.info(f"POST /problems - user={actor.id} ward={actor.ward_number} category={body.category.value}")

    problem = await problems.create_problem(
        body.model_dump(mode="json"),
        reported_by=actor.id,
        ward_number=actor.ward_number,
    )

    await publish_best_effort(bus, problem["ward_number"], NEW_PROBLEM, problem_event_payload(problem))

    return {
        "message": "Problem reported successfully",
        "problem": await present_problem(problem, users),
    }


@router.get("", response_model=ProblemListResponse)
async def list_problems(
    status_filter: Optional[ProblemStatus] = Query(None, alias="status"),
    category: Optional[ProblemCategory] = Query(None),
    ward_number: Optional[str] = Query(None, alias="wardNumber"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_current_actor),
    problems: ProblemService = Depends(get_problem_service),
    users: UserService = Depends(get_user_service),
):
    """
    Paginated problems, newest first.

    Residents only ever see their own ward: a wardNumber filter for another
    ward is silently replaced, not rejected.
    """
    requested_ward = _parse_ward_filter(ward_number) if actor.is_admin else None
    result = await problems.list_problems(
        ward_number=scope_ward_filter(actor, requested_ward),
        status=status_filter.value if status_filter else None,
        category=category.value if category else None,
        page=page,
        page_size=limit,
    )
    result["problems"] = await with_people(result["problems"], users)
    return result


@router.get("/stats/summary", response_model=StatsSummaryResponse)
async def stats_summary(
    actor: Actor = Depends(get_current_actor),
    problems: ProblemService = Depends(get_problem_service),
):
    """Counts by status, by category and by ward. Residents get their ward only."""
    return await problems.stats_summary(ward_number=scope_ward_filter(actor, None))


@router.get("/{problem_id}", response_model=ProblemEnvelope)
async def get_problem(
    problem_id: str,
    actor: Actor = Depends(get_current_actor),
    problems: ProblemService = Depends(get_problem_service),
    users: UserService = Depends(get_user_service),
):
    """Single problem. Fails closed: 403 for a problem outside the caller's ward."""
    problem = await problems.get_problem(problem_id)

    if not can_view(actor, problem["ward_number"]):
        logger.warning(f"User {actor.id} (ward {actor.ward_number}) denied problem {problem_id}")
        raise AccessDenied()

    return {"problem": await present_problem(problem, users)}


@router.put("/{problem_id}/status", response_model=ProblemEnvelope)
async def update_problem_status(
    problem_id: str,
    body: StatusUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    problems: ProblemService = Depends(get_problem_service),
    users: UserService = Depends(get_user_service),
    bus: NotificationBus = Depends(get_notification_bus),
):
    """
    Update status, admin notes and (optionally) the assignee. Admin only.

    Resolved/Closed stamp resolvedAt; other statuses keep whatever resolvedAt
    already holds. Concurrent updates to the same problem are last-write-wins.
    """
    if not can_mutate_status(actor):
        raise AccessDenied("Access denied. Admin only.")

    # 404 for an unknown problem takes precedence over a bad assignee
    await problems.get_problem(problem_id)
    if body.assigned_to and await users.get_user(body.assigned_to) is None:
        raise ValidationFailed([{"field": "assignedTo", "message": "Assignee not found"}])

    problem = await problems.update_status(problem_id, body.status.value, body.admin_notes)
    if body.assigned_to:
        problem = await problems.assign(problem_id, body.assigned_to)

    await publish_best_effort(
        bus,
        problem["ward_number"],
        PROBLEM_UPDATED,
        problem_event_payload(problem, include_status=True),
    )

    return {
        "message": "Problem status updated successfully",
        "problem": await present_problem(problem, users),
    }
