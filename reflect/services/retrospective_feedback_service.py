"""
Retrospective Feedback Service
==============================

Business rules for highlights, notes and goals attached to a retrospective.

Dating rules:
    - Every item is dated to the start of the sprint it was added in.
    - Non-goal items are resolved immediately, at the sprint's end.
    - Goals stay open until explicitly resolved; resolving stamps the end of
      the sprint in which it happened. A resolved goal is read-only.

Listing is windowed on the sprint: an item belongs to a sprint when its
added_at lies in [start_date, end_date]. Goals additionally have three named
views (see GoalListType).

Every operation is a single read-modify-write on the session; there is no
version check, so concurrent updates are last-write-wins.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List

from fastapi import Depends
from sqlmodel import Session, col, select

from reflect.core.database import get_session
from reflect.core.errors import ReflectError
from reflect.models.feedback import FeedbackType, GoalListType, RetrospectiveFeedback
from reflect.models.retrospective import Sprint
from reflect.schemas.feedback import (
    RetrospectiveFeedbackCreate,
    RetrospectiveFeedbackList,
    RetrospectiveFeedbackRead,
    RetrospectiveFeedbackUpdate,
)
from reflect.services.user_lookup import load_users, parse_id

logger = logging.getLogger(__name__)


def _added_in_sprint(sprint: Sprint) -> list:
    return [
        col(RetrospectiveFeedback.resolved_at).is_(None),
        col(RetrospectiveFeedback.added_at) >= sprint.start_date,
        col(RetrospectiveFeedback.added_at) <= sprint.end_date,
    ]


def _completed_in_sprint(sprint: Sprint) -> list:
    return [
        col(RetrospectiveFeedback.resolved_at) >= sprint.start_date,
        col(RetrospectiveFeedback.resolved_at) <= sprint.end_date,
    ]


def _pending_at_sprint(sprint: Sprint) -> list:
    return [
        col(RetrospectiveFeedback.resolved_at).is_(None),
        col(RetrospectiveFeedback.added_at) < sprint.end_date,
    ]


# One filter per goal view; keep in step with GoalListType.
GOAL_FILTERS: Dict[GoalListType, Callable[[Sprint], list]] = {
    GoalListType.ADDED: _added_in_sprint,
    GoalListType.COMPLETED: _completed_in_sprint,
    GoalListType.PENDING: _pending_at_sprint,
}


class RetrospectiveFeedbackService:
    """Add, update, resolve and list retrospective feedback."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        user_id: int,
        sprint_id: str,
        retro_id: str,
        feedback_type: FeedbackType,
        feedback_data: RetrospectiveFeedbackCreate,
    ) -> RetrospectiveFeedbackRead:
        """Create a feedback item dated to the sprint's start."""
        retro_pk = self._parse_retro_id(retro_id)
        sprint = self._get_sprint(sprint_id)

        feedback = RetrospectiveFeedback(
            retrospective_id=retro_pk,
            type=feedback_type.value,
            sub_type=feedback_data.sub_type,
            text=feedback_data.text,
            scope=feedback_data.scope.value,
            added_at=sprint.start_date,
            created_by_id=user_id,
            assignee_id=None,
            expected_at=None,
            resolved_at=None,
        )
        if feedback_type != FeedbackType.GOAL:
            feedback.resolved_at = sprint.end_date

        self.db.add(feedback)
        self.db.commit()
        self.db.refresh(feedback)

        logger.info(
            "feedback_added",
            extra={"feedback_id": feedback.id, "type": feedback.type, "sprint_id": sprint.id},
        )
        return self._get_feedback_read(feedback.id)

    def update(
        self,
        user_id: int,
        retro_id: str,
        feedback_id: str,
        feedback_data: RetrospectiveFeedbackUpdate,
    ) -> RetrospectiveFeedbackRead:
        """Patch scope/text/expected_at when supplied; always overwrite assignee."""
        retro_pk = self._parse_retro_id(retro_id)
        feedback = self._get_feedback(retro_pk, feedback_id)

        if feedback.is_goal and feedback.is_resolved:
            raise ReflectError("REF-FB-001", detail=f"feedback {feedback.id} resolved at {feedback.resolved_at}")

        if feedback_data.scope is not None:
            feedback.scope = feedback_data.scope.value

        if feedback_data.text is not None:
            feedback.text = feedback_data.text

        if feedback_data.expected_at is not None:
            if not feedback.is_goal:
                raise ReflectError("REF-FB-002", detail=f"feedback {feedback.id} is a {feedback.type}")
            feedback.expected_at = feedback_data.expected_at

        feedback.assignee_id = feedback_data.assignee_id

        self._save(feedback)
        logger.info("feedback_updated", extra={"feedback_id": feedback.id, "user_id": user_id})
        return self._get_feedback_read(feedback.id)

    def resolve(
        self,
        user_id: int,
        sprint_id: str,
        retro_id: str,
        feedback_id: str,
        mark_resolved: bool,
    ) -> RetrospectiveFeedbackRead:
        """Resolve (stamp sprint end) or reopen a goal. Idempotent either way."""
        retro_pk = self._parse_retro_id(retro_id)
        sprint = self._get_sprint(sprint_id)
        feedback = self._get_feedback(retro_pk, feedback_id)

        if not feedback.is_goal:
            raise ReflectError("REF-FB-003", detail=f"feedback {feedback.id} is a {feedback.type}")

        if mark_resolved and feedback.resolved_at is None:
            feedback.resolved_at = sprint.end_date
            logger.info("goal_resolved", extra={"feedback_id": feedback.id, "sprint_id": sprint.id})

        if not mark_resolved and feedback.resolved_at is not None:
            feedback.resolved_at = None
            logger.info("goal_unresolved", extra={"feedback_id": feedback.id, "sprint_id": sprint.id})

        self._save(feedback)
        return self._get_feedback_read(feedback.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(
        self,
        user_id: int,
        sprint_id: str,
        retro_id: str,
        feedback_type: FeedbackType,
    ) -> RetrospectiveFeedbackList:
        """All feedback of one type added within the sprint window (inclusive)."""
        retro_pk = self._parse_retro_id(retro_id)
        sprint = self._get_sprint(sprint_id)

        query = (
            select(RetrospectiveFeedback)
            .where(RetrospectiveFeedback.retrospective_id == retro_pk)
            .where(RetrospectiveFeedback.type == feedback_type.value)
            .where(col(RetrospectiveFeedback.added_at) >= sprint.start_date)
            .where(col(RetrospectiveFeedback.added_at) <= sprint.end_date)
            .order_by(col(RetrospectiveFeedback.added_at), col(RetrospectiveFeedback.id))
        )
        return RetrospectiveFeedbackList(feedbacks=self._hydrate(self.db.exec(query).all()))

    def list_goal(
        self,
        user_id: int,
        sprint_id: str,
        retro_id: str,
        goal_type: str,
    ) -> RetrospectiveFeedbackList:
        """Goals in one of the named views: added, completed or pending."""
        try:
            view = GoalListType(goal_type)
        except ValueError:
            raise ReflectError("REF-API-003", detail=f"goal type {goal_type!r}")

        retro_pk = self._parse_retro_id(retro_id)
        sprint = self._get_sprint(sprint_id)

        query = (
            select(RetrospectiveFeedback)
            .where(RetrospectiveFeedback.retrospective_id == retro_pk)
            .where(RetrospectiveFeedback.type == FeedbackType.GOAL.value)
        )
        for condition in GOAL_FILTERS[view](sprint):
            query = query.where(condition)
        query = query.order_by(col(RetrospectiveFeedback.added_at), col(RetrospectiveFeedback.id))

        return RetrospectiveFeedbackList(feedbacks=self._hydrate(self.db.exec(query).all()))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_retro_id(retro_id: str) -> int:
        retro_pk = parse_id(retro_id)
        if retro_pk is None:
            raise ReflectError("REF-API-002", detail=f"retrospective id {retro_id!r}")
        return retro_pk

    def _get_sprint(self, sprint_id: str) -> Sprint:
        sprint_pk = parse_id(sprint_id)
        if sprint_pk is None:
            raise ReflectError("REF-API-004", detail=f"sprint id {sprint_id!r}")
        sprint = self.db.get(Sprint, sprint_pk)
        if sprint is None or sprint.deleted_at is not None:
            raise ReflectError("REF-DB-001", detail=f"sprint {sprint_pk}")
        return sprint

    def _get_feedback(self, retro_pk: int, feedback_id: str) -> RetrospectiveFeedback:
        feedback_pk = parse_id(feedback_id)
        if feedback_pk is None:
            raise ReflectError("REF-API-004", detail=f"feedback id {feedback_id!r}")
        feedback = self.db.exec(
            select(RetrospectiveFeedback)
            .where(RetrospectiveFeedback.id == feedback_pk)
            .where(RetrospectiveFeedback.retrospective_id == retro_pk)
        ).first()
        if feedback is None:
            raise ReflectError("REF-DB-002", detail=f"feedback {feedback_pk} in retrospective {retro_pk}")
        return feedback

    def _save(self, feedback: RetrospectiveFeedback) -> None:
        feedback.updated_at = datetime.now(timezone.utc)
        self.db.add(feedback)
        self.db.commit()
        self.db.refresh(feedback)

    def _get_feedback_read(self, feedback_pk: int) -> RetrospectiveFeedbackRead:
        feedback = self.db.get(RetrospectiveFeedback, feedback_pk)
        if feedback is None:
            raise ReflectError("REF-DB-002", detail=f"feedback {feedback_pk} vanished after write")
        return self._hydrate([feedback])[0]

    def _hydrate(self, feedbacks: List[RetrospectiveFeedback]) -> List[RetrospectiveFeedbackRead]:
        user_ids = [f.created_by_id for f in feedbacks] + [f.assignee_id for f in feedbacks]
        users = load_users(self.db, user_ids)
        return [RetrospectiveFeedbackRead.from_model(f, users) for f in feedbacks]


def get_feedback_service(db: Session = Depends(get_session)) -> RetrospectiveFeedbackService:
    """FastAPI dependency: one service per request session."""
    return RetrospectiveFeedbackService(db)
