"""
Retrospective Feedback Model
============================

Highlights, notes and goals collected during a retrospective.

Lifecycle:
    - highlight / note: resolved on creation (resolved_at = sprint end).
    - goal: unresolved on creation; resolved_at toggled only by Resolve.
      Once resolved it is read-only for Update.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Column, Field, Text

from reflect.models.base import TimestampMixin


class FeedbackType(str, Enum):
    HIGHLIGHT = "highlight"
    NOTE = "note"
    GOAL = "goal"


class FeedbackScope(str, Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"
    ORGANISATION = "organisation"


class GoalListType(str, Enum):
    """Named goal views: added in, completed in, or still pending at a sprint."""
    ADDED = "added"
    COMPLETED = "completed"
    PENDING = "pending"


class RetrospectiveFeedback(TimestampMixin, table=True):
    __tablename__ = "retrospective_feedbacks"

    id: Optional[int] = Field(default=None, primary_key=True)
    retrospective_id: int = Field(foreign_key="retrospectives.id", index=True)
    type: str = Field(max_length=16, index=True)
    sub_type: Optional[str] = Field(default=None, max_length=64, nullable=True)
    text: str = Field(default="", sa_column=Column(Text, nullable=False))
    scope: str = Field(default=FeedbackScope.TEAM.value, max_length=16)

    added_at: datetime
    expected_at: Optional[datetime] = Field(default=None, nullable=True)
    resolved_at: Optional[datetime] = Field(default=None, nullable=True)

    assignee_id: Optional[int] = Field(default=None, foreign_key="users.id", nullable=True)
    created_by_id: int = Field(foreign_key="users.id")

    @property
    def is_goal(self) -> bool:
        return self.type == FeedbackType.GOAL.value

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None
