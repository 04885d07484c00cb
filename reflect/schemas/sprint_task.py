"""Sprint task serializers."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from reflect.models.sprint_task import SprintTask
from reflect.models.user import User
from reflect.schemas.feedback import UserRead


class SprintTaskUpdate(BaseModel):
    rating: Optional[int] = Field(default=None, ge=0, le=4)
    comment: Optional[str] = None
    points_earned: Optional[float] = Field(default=None, ge=0)


class SprintTaskRead(BaseModel):
    id: int
    sprint_id: int
    key: str
    summary: str
    type: str
    status: str
    priority: str
    estimate: float
    points_earned: float
    rating: Optional[int] = None
    comment: Optional[str] = None
    done_at: Optional[datetime] = None
    is_done: bool
    assignee: Optional[UserRead] = None

    @classmethod
    def from_model(cls, task: SprintTask, users: Dict[int, User]) -> "SprintTaskRead":
        assignee = users.get(task.assignee_id) if task.assignee_id else None
        return cls(
            id=task.id,
            sprint_id=task.sprint_id,
            key=task.key,
            summary=task.summary,
            type=task.type,
            status=task.status,
            priority=task.priority,
            estimate=task.estimate,
            points_earned=task.points_earned,
            rating=task.rating,
            comment=task.comment,
            done_at=task.done_at,
            is_done=task.done_at is not None,
            assignee=UserRead.model_validate(assignee) if assignee else None,
        )


class SprintTaskList(BaseModel):
    tasks: List[SprintTaskRead]
