"""
Sprint Task Model
=================

A tracker task (story, bug, ...) as worked in one sprint, with the
retrospective's per-sprint assessment (rating, comment, points earned).
A task is done while done_at is set.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, Field, Text

from reflect.models.base import TimestampMixin


class SprintTask(TimestampMixin, table=True):
    __tablename__ = "sprint_tasks"

    id: Optional[int] = Field(default=None, primary_key=True)
    sprint_id: int = Field(foreign_key="sprints.id", index=True)

    key: str = Field(max_length=64)  # tracker key, e.g. "PROJ-12"
    summary: str = Field(default="", max_length=512)
    type: str = Field(default="task", max_length=32)
    status: str = Field(default="", max_length=32)
    priority: str = Field(default="", max_length=32)
    assignee_id: Optional[int] = Field(default=None, foreign_key="users.id", nullable=True)
    estimate: float = Field(default=0.0)

    points_earned: float = Field(default=0.0)
    rating: Optional[int] = Field(default=None, nullable=True)  # 0..4
    comment: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    done_at: Optional[datetime] = Field(default=None, nullable=True)
