"""
Retrospective feedback serializers.

Create/update bodies are partial: on update, scope, text and expected_at are
applied only when supplied (non-null); assignee_id is always written, so an
omitted assignee clears it.

Timestamps without an offset are taken to be UTC.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from reflect.models.feedback import FeedbackScope, RetrospectiveFeedback
from reflect.models.user import User


class UserRead(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str

    model_config = {"from_attributes": True}


class RetrospectiveFeedbackCreate(BaseModel):
    sub_type: Optional[str] = Field(default=None, max_length=64)
    text: str = ""
    scope: FeedbackScope = FeedbackScope.TEAM


class RetrospectiveFeedbackUpdate(BaseModel):
    scope: Optional[FeedbackScope] = None
    text: Optional[str] = None
    expected_at: Optional[datetime] = None
    assignee_id: Optional[int] = None

    @field_validator("expected_at")
    @classmethod
    def validate_expected_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Attach UTC to naive timestamps; the store only accepts aware ones."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class RetrospectiveFeedbackRead(BaseModel):
    id: int
    retrospective_id: int
    type: str
    sub_type: Optional[str] = None
    text: str
    scope: str
    added_at: datetime
    expected_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    assignee: Optional[UserRead] = None
    created_by: Optional[UserRead] = None

    @classmethod
    def from_model(
        cls, feedback: RetrospectiveFeedback, users: Dict[int, User]
    ) -> "RetrospectiveFeedbackRead":
        assignee = users.get(feedback.assignee_id) if feedback.assignee_id else None
        created_by = users.get(feedback.created_by_id)
        return cls(
            id=feedback.id,
            retrospective_id=feedback.retrospective_id,
            type=feedback.type,
            sub_type=feedback.sub_type,
            text=feedback.text,
            scope=feedback.scope,
            added_at=feedback.added_at,
            expected_at=feedback.expected_at,
            resolved_at=feedback.resolved_at,
            created_at=feedback.created_at,
            updated_at=feedback.updated_at,
            assignee=UserRead.model_validate(assignee) if assignee else None,
            created_by=UserRead.model_validate(created_by) if created_by else None,
        )


class RetrospectiveFeedbackList(BaseModel):
    feedbacks: List[RetrospectiveFeedbackRead]
