"""
Sprint Goals Router
===================

Goals carry the resolved/unresolved lifecycle:

    POST   /goals/                    add (unresolved)
    GET    /goals/?goal_type=<view>   added | completed | pending
    PUT    /goals/{goal_id}/          update (rejected once resolved)
    POST   /goals/{goal_id}/resolve/  resolve at the sprint's end
    DELETE /goals/{goal_id}/resolve/  reopen

All mutations are recorded in the audit trail.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from reflect.auth.user_auth import AuthenticatedUser, get_current_user
from reflect.core.errors import ReflectError
from reflect.models.feedback import FeedbackType
from reflect.routers.responses import FEEDBACK_TRAIL_ITEM, failed, forbidden
from reflect.schemas.feedback import (
    RetrospectiveFeedbackCreate,
    RetrospectiveFeedbackList,
    RetrospectiveFeedbackRead,
    RetrospectiveFeedbackUpdate,
)
from reflect.services.permission_service import PermissionService, get_permission_service
from reflect.services.retrospective_feedback_service import (
    RetrospectiveFeedbackService,
    get_feedback_service,
)
from reflect.services.trail_service import TrailService, get_trail_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/goals/", status_code=201, response_model=RetrospectiveFeedbackRead, summary="Add goal")
async def add_goal(
    sprint_id: str,
    retro_id: str,
    body: RetrospectiveFeedbackCreate,
    background_tasks: BackgroundTasks,
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: RetrospectiveFeedbackService = Depends(get_feedback_service),
    trail: TrailService = Depends(get_trail_service),
):
    if not permissions.can_access_retrospective_feedback(sprint_id):
        return forbidden()
    if not permissions.user_can_edit_sprint(retro_id, sprint_id, user.user_id):
        return forbidden()

    try:
        goal = service.add(user.user_id, sprint_id, retro_id, FeedbackType.GOAL, body)
    except (ReflectError, SQLAlchemyError) as exc:
        return failed("Failed to create goal", exc)

    background_tasks.add_task(trail.add, "Added Goal", FEEDBACK_TRAIL_ITEM, str(goal.id), user.user_id)
    return goal


@router.get("/goals/", response_model=RetrospectiveFeedbackList, summary="List goals by view")
async def list_goals(
    sprint_id: str,
    retro_id: str,
    goal_type: str = Query(..., description="added | completed | pending"),
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: RetrospectiveFeedbackService = Depends(get_feedback_service),
):
    if not permissions.can_access_retrospective_feedback(sprint_id):
        return forbidden()
    if not permissions.user_can_access_sprint(retro_id, sprint_id, user.user_id):
        return forbidden()

    try:
        return service.list_goal(user.user_id, sprint_id, retro_id, goal_type)
    except (ReflectError, SQLAlchemyError) as exc:
        return failed("Failed to fetch goals", exc)


@router.put("/goals/{goal_id}/", response_model=RetrospectiveFeedbackRead, summary="Update goal")
async def update_goal(
    sprint_id: str,
    retro_id: str,
    goal_id: str,
    body: RetrospectiveFeedbackUpdate,
    background_tasks: BackgroundTasks,
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: RetrospectiveFeedbackService = Depends(get_feedback_service),
    trail: TrailService = Depends(get_trail_service),
):
    if not permissions.can_access_retrospective_feedback(sprint_id):
        return forbidden()
    if not permissions.user_can_edit_sprint(retro_id, sprint_id, user.user_id):
        return forbidden()

    try:
        goal = service.update(user.user_id, retro_id, goal_id, body)
    except (ReflectError, SQLAlchemyError) as exc:
        return failed("Failed to update goal", exc)

    background_tasks.add_task(trail.add, "Updated Goal", FEEDBACK_TRAIL_ITEM, goal_id, user.user_id)
    return goal


@router.post("/goals/{goal_id}/resolve/", response_model=RetrospectiveFeedbackRead, summary="Resolve goal")
async def resolve_goal(
    sprint_id: str,
    retro_id: str,
    goal_id: str,
    background_tasks: BackgroundTasks,
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: RetrospectiveFeedbackService = Depends(get_feedback_service),
    trail: TrailService = Depends(get_trail_service),
):
    return _set_resolution(
        True, sprint_id, retro_id, goal_id, background_tasks, user, permissions, service, trail
    )


@router.delete("/goals/{goal_id}/resolve/", response_model=RetrospectiveFeedbackRead, summary="Reopen goal")
async def unresolve_goal(
    sprint_id: str,
    retro_id: str,
    goal_id: str,
    background_tasks: BackgroundTasks,
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: RetrospectiveFeedbackService = Depends(get_feedback_service),
    trail: TrailService = Depends(get_trail_service),
):
    return _set_resolution(
        False, sprint_id, retro_id, goal_id, background_tasks, user, permissions, service, trail
    )


def _set_resolution(
    mark_resolved: bool,
    sprint_id: str,
    retro_id: str,
    goal_id: str,
    background_tasks: BackgroundTasks,
    user: AuthenticatedUser,
    permissions: PermissionService,
    service: RetrospectiveFeedbackService,
    trail: TrailService,
):
    if not permissions.can_access_retrospective_feedback(sprint_id):
        return forbidden()
    if not permissions.user_can_edit_sprint(retro_id, sprint_id, user.user_id):
        return forbidden()

    action = "Resolved Goal" if mark_resolved else "Unresolved Goal"
    try:
        goal = service.resolve(user.user_id, sprint_id, retro_id, goal_id, mark_resolved)
    except (ReflectError, SQLAlchemyError) as exc:
        return failed(f"Failed to {'resolve' if mark_resolved else 'unresolve'} goal", exc)

    background_tasks.add_task(trail.add, action, FEEDBACK_TRAIL_ITEM, goal_id, user.user_id)
    return goal
