"""
Sprint Tasks Router
===================

Thin pass-through to SprintTaskService: the service picks the status code,
errors carry theirs through the ReflectError registry handler.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from reflect.auth.user_auth import AuthenticatedUser, get_current_user
from reflect.routers.responses import forbidden
from reflect.schemas.sprint_task import SprintTaskUpdate
from reflect.services.permission_service import PermissionService, get_permission_service
from reflect.services.sprint_task_service import SprintTaskService, get_sprint_task_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _respond(payload, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


@router.get("/tasks/", summary="List the sprint's tasks")
async def list_tasks(
    sprint_id: str,
    retro_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: SprintTaskService = Depends(get_sprint_task_service),
):
    if not permissions.user_can_access_sprint(retro_id, sprint_id, user.user_id):
        return forbidden()

    tasks, status_code = service.list(retro_id, sprint_id)
    return _respond(tasks, status_code)


@router.get("/tasks/{sprint_task_id}/", summary="Get a sprint task")
async def get_task(
    sprint_id: str,
    retro_id: str,
    sprint_task_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: SprintTaskService = Depends(get_sprint_task_service),
):
    if not permissions.user_can_access_sprint_task(retro_id, sprint_id, sprint_task_id, user.user_id):
        return forbidden()

    task, status_code = service.get(sprint_task_id, retro_id, sprint_id)
    return _respond(task, status_code)


@router.patch("/tasks/{sprint_task_id}/", summary="Update a sprint task's assessment")
async def update_task(
    sprint_id: str,
    retro_id: str,
    sprint_task_id: str,
    body: SprintTaskUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: SprintTaskService = Depends(get_sprint_task_service),
):
    if not permissions.user_can_edit_sprint_task(retro_id, sprint_id, sprint_task_id, user.user_id):
        return forbidden()

    task, status_code = service.update(sprint_task_id, retro_id, sprint_id, body)
    return _respond(task, status_code)


@router.post("/tasks/{sprint_task_id}/done/", summary="Mark a sprint task done")
async def mark_task_done(
    sprint_id: str,
    retro_id: str,
    sprint_task_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: SprintTaskService = Depends(get_sprint_task_service),
):
    if not permissions.user_can_edit_sprint_task(retro_id, sprint_id, sprint_task_id, user.user_id):
        return forbidden()

    task, status_code = service.mark_done(sprint_task_id, retro_id, sprint_id)
    return _respond(task, status_code)


@router.delete("/tasks/{sprint_task_id}/done/", summary="Mark a sprint task not done")
async def mark_task_undone(
    sprint_id: str,
    retro_id: str,
    sprint_task_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    permissions: PermissionService = Depends(get_permission_service),
    service: SprintTaskService = Depends(get_sprint_task_service),
):
    if not permissions.user_can_edit_sprint_task(retro_id, sprint_id, sprint_task_id, user.user_id):
        return forbidden()

    task, status_code = service.mark_undone(sprint_task_id, retro_id, sprint_id)
    return _respond(task, status_code)
