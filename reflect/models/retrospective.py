"""
Retrospective & Sprint Models
=============================

A retrospective belongs to a team and runs over a series of sprints. The
sprint's [start_date, end_date] window is what feedback is dated and
resolved against; this service only reads sprints.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field

from reflect.models.base import TimestampMixin


class SprintStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"


class Retrospective(TimestampMixin, table=True):
    __tablename__ = "retrospectives"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    project_name: str = Field(default="", max_length=255)
    team_id: int = Field(foreign_key="teams.id", index=True)
    created_by_id: int = Field(foreign_key="users.id")


class Sprint(TimestampMixin, table=True):
    __tablename__ = "sprints"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    retrospective_id: int = Field(foreign_key="retrospectives.id", index=True)
    start_date: datetime
    end_date: datetime
    status: str = Field(default=SprintStatus.DRAFT.value, max_length=16)
    created_by_id: int = Field(foreign_key="users.id")
    deleted_at: Optional[datetime] = Field(default=None, nullable=True)
