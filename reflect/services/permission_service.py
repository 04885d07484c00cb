"""
Permission Service
==================

Yes/no capability checks used by the routers before any domain call.

Rules:
    - Feedback is collected only on sprints that left draft.
    - A user can access a sprint when it belongs to the retrospective and the
      user is an active member of the retrospective's team.
    - Completed sprints are frozen: accessible, not editable.
    - Task checks add "the task belongs to this sprint".

Identifiers arrive as raw path strings; anything non-numeric is denied.
"""

import logging
from typing import Optional

from fastapi import Depends
from sqlmodel import Session, col, select

from reflect.core.database import get_session
from reflect.models.retrospective import Retrospective, Sprint, SprintStatus
from reflect.models.sprint_task import SprintTask
from reflect.models.user import UserTeam
from reflect.services.user_lookup import parse_id

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(self, db: Session):
        self.db = db

    def can_access_retrospective_feedback(self, sprint_id: str) -> bool:
        sprint = self._live_sprint(sprint_id)
        return sprint is not None and sprint.status != SprintStatus.DRAFT.value

    def user_can_access_sprint(self, retro_id: str, sprint_id: str, user_id: int) -> bool:
        return self._accessible_sprint(retro_id, sprint_id, user_id) is not None

    def user_can_edit_sprint(self, retro_id: str, sprint_id: str, user_id: int) -> bool:
        sprint = self._accessible_sprint(retro_id, sprint_id, user_id)
        return sprint is not None and sprint.status != SprintStatus.COMPLETED.value

    def user_can_access_sprint_task(
        self, retro_id: str, sprint_id: str, sprint_task_id: str, user_id: int
    ) -> bool:
        sprint = self._accessible_sprint(retro_id, sprint_id, user_id)
        return sprint is not None and self._task_in_sprint(sprint, sprint_task_id)

    def user_can_edit_sprint_task(
        self, retro_id: str, sprint_id: str, sprint_task_id: str, user_id: int
    ) -> bool:
        if not self.user_can_edit_sprint(retro_id, sprint_id, user_id):
            return False
        sprint = self._live_sprint(sprint_id)
        return sprint is not None and self._task_in_sprint(sprint, sprint_task_id)

    # ------------------------------------------------------------------

    def _live_sprint(self, sprint_id: str) -> Optional[Sprint]:
        sprint_pk = parse_id(sprint_id)
        if sprint_pk is None:
            return None
        sprint = self.db.get(Sprint, sprint_pk)
        if sprint is None or sprint.deleted_at is not None:
            return None
        return sprint

    def _accessible_sprint(self, retro_id: str, sprint_id: str, user_id: int) -> Optional[Sprint]:
        retro_pk = parse_id(retro_id)
        sprint = self._live_sprint(sprint_id)
        if retro_pk is None or sprint is None or sprint.retrospective_id != retro_pk:
            return None

        retrospective = self.db.get(Retrospective, retro_pk)
        if retrospective is None:
            return None

        membership = self.db.exec(
            select(UserTeam)
            .where(UserTeam.user_id == user_id)
            .where(UserTeam.team_id == retrospective.team_id)
            .where(col(UserTeam.leaved_at).is_(None))
        ).first()
        if membership is None:
            logger.info(
                "sprint_access_denied",
                extra={"user_id": user_id, "retro_id": retro_pk, "sprint_id": sprint.id},
            )
            return None
        return sprint

    def _task_in_sprint(self, sprint: Sprint, sprint_task_id: str) -> bool:
        task_pk = parse_id(sprint_task_id)
        if task_pk is None:
            return False
        task = self.db.get(SprintTask, task_pk)
        return task is not None and task.sprint_id == sprint.id


def get_permission_service(db: Session = Depends(get_session)) -> PermissionService:
    return PermissionService(db)
