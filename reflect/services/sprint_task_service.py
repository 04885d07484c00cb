"""
Sprint Task Service
===================

List, inspect, assess and complete the tasks worked in a sprint.

Each operation returns ``(payload, status_code)`` so the router can forward
the status this service decided; failures raise ReflectError whose registry
entry carries the HTTP status (404 for unknown sprint/task, 400 for invalid
assessments).
"""

import logging
from datetime import datetime, timezone
from typing import Tuple

from fastapi import Depends, status
from sqlmodel import Session, col, select

from reflect.core.database import get_session
from reflect.core.errors import ReflectError
from reflect.models.retrospective import Sprint
from reflect.models.sprint_task import SprintTask
from reflect.schemas.sprint_task import SprintTaskList, SprintTaskRead, SprintTaskUpdate
from reflect.services.user_lookup import load_users, parse_id

logger = logging.getLogger(__name__)


class SprintTaskService:
    def __init__(self, db: Session):
        self.db = db

    def list(self, retro_id: str, sprint_id: str) -> Tuple[SprintTaskList, int]:
        sprint = self._get_sprint(retro_id, sprint_id)
        tasks = self.db.exec(
            select(SprintTask)
            .where(SprintTask.sprint_id == sprint.id)
            .order_by(col(SprintTask.key), col(SprintTask.id))
        ).all()
        users = load_users(self.db, [t.assignee_id for t in tasks])
        return SprintTaskList(tasks=[SprintTaskRead.from_model(t, users) for t in tasks]), status.HTTP_200_OK

    def get(self, task_id: str, retro_id: str, sprint_id: str) -> Tuple[SprintTaskRead, int]:
        sprint = self._get_sprint(retro_id, sprint_id)
        task = self._get_task(sprint, task_id)
        return self._read(task), status.HTTP_200_OK

    def update(
        self, task_id: str, retro_id: str, sprint_id: str, data: SprintTaskUpdate
    ) -> Tuple[SprintTaskRead, int]:
        """Apply the supplied assessment fields; omitted fields are left alone."""
        sprint = self._get_sprint(retro_id, sprint_id)
        task = self._get_task(sprint, task_id)

        if data.points_earned is not None:
            if data.points_earned > task.estimate:
                raise ReflectError(
                    "REF-TSK-001",
                    detail=f"task {task.id}: {data.points_earned} > estimate {task.estimate}",
                )
            task.points_earned = data.points_earned

        if data.rating is not None:
            task.rating = data.rating

        if data.comment is not None:
            task.comment = data.comment

        self._save(task)
        return self._read(task), status.HTTP_200_OK

    def mark_done(self, task_id: str, retro_id: str, sprint_id: str) -> Tuple[SprintTaskRead, int]:
        """Mark done as of the sprint's end. Already-done tasks keep their date."""
        sprint = self._get_sprint(retro_id, sprint_id)
        task = self._get_task(sprint, task_id)

        if task.done_at is None:
            task.done_at = sprint.end_date
            logger.info("task_marked_done", extra={"task_id": task.id, "sprint_id": sprint.id})

        self._save(task)
        return self._read(task), status.HTTP_200_OK

    def mark_undone(self, task_id: str, retro_id: str, sprint_id: str) -> Tuple[SprintTaskRead, int]:
        sprint = self._get_sprint(retro_id, sprint_id)
        task = self._get_task(sprint, task_id)

        if task.done_at is not None:
            task.done_at = None
            logger.info("task_marked_undone", extra={"task_id": task.id, "sprint_id": sprint.id})

        self._save(task)
        return self._read(task), status.HTTP_200_OK

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_sprint(self, retro_id: str, sprint_id: str) -> Sprint:
        retro_pk = parse_id(retro_id)
        if retro_pk is None:
            raise ReflectError("REF-API-002", detail=f"retrospective id {retro_id!r}")
        sprint_pk = parse_id(sprint_id)
        if sprint_pk is None:
            raise ReflectError("REF-API-004", detail=f"sprint id {sprint_id!r}")

        sprint = self.db.get(Sprint, sprint_pk)
        if sprint is None or sprint.retrospective_id != retro_pk or sprint.deleted_at is not None:
            raise ReflectError("REF-DB-001", detail=f"sprint {sprint_pk} in retrospective {retro_pk}")
        return sprint

    def _get_task(self, sprint: Sprint, task_id: str) -> SprintTask:
        task_pk = parse_id(task_id)
        if task_pk is None:
            raise ReflectError("REF-API-004", detail=f"sprint task id {task_id!r}")
        task = self.db.get(SprintTask, task_pk)
        if task is None or task.sprint_id != sprint.id:
            raise ReflectError("REF-DB-003", detail=f"sprint task {task_pk} in sprint {sprint.id}")
        return task

    def _save(self, task: SprintTask) -> None:
        task.updated_at = datetime.now(timezone.utc)
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)

    def _read(self, task: SprintTask) -> SprintTaskRead:
        return SprintTaskRead.from_model(task, load_users(self.db, [task.assignee_id]))


def get_sprint_task_service(db: Session = Depends(get_session)) -> SprintTaskService:
    return SprintTaskService(db)
