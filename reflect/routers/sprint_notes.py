"""
Sprint Notes Router
===================

Notes of a sprint's retrospective: add, list, update.

Every handler checks feedback access on the sprint, then the user's sprint
permission, before touching the service. Add and Update are recorded in the
audit trail.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
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


@router.post(
    "/notes/",
    status_code=201,
    response_model=RetrospectiveFeedbackRead,
    summary="Add note to a sprint's retrospective",
)
async def add_note(
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
        note = service.add(user.user_id, sprint_id, retro_id, FeedbackType.NOTE, body)
    except (ReflectError, SQLAlchemyError) as exc:
        return failed("Failed to create note", exc)

    background_tasks.add_task(
        trail.add, "Added Note", FEEDBACK_TRAIL_ITEM, str(note.id), user.user_id
    )
    return note


@router.get(
    "/notes/",
    response_model=RetrospectiveFeedbackList,
    summary="List notes added during the sprint",
)
async def list_notes(
    sprint_id: str,
    retro_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: RetrospectiveFeedbackService = Depends(get_feedback_service),
):
    if not permissions.can_access_retrospective_feedback(sprint_id):
        return forbidden()
    if not permissions.user_can_access_sprint(retro_id, sprint_id, user.user_id):
        return forbidden()

    try:
        return service.list(user.user_id, sprint_id, retro_id, FeedbackType.NOTE)
    except (ReflectError, SQLAlchemyError) as exc:
        return failed("Failed to fetch notes", exc)


@router.put(
    "/notes/{note_id}/",
    response_model=RetrospectiveFeedbackRead,
    summary="Update a note",
)
async def update_note(
    sprint_id: str,
    retro_id: str,
    note_id: str,
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
        note = service.update(user.user_id, retro_id, note_id, body)
    except (ReflectError, SQLAlchemyError) as exc:
        return failed("Failed to update note", exc)

    background_tasks.add_task(
        trail.add, "Updated Note", FEEDBACK_TRAIL_ITEM, note_id, user.user_id
    )
    return note
