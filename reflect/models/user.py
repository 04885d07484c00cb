"""
User & Team Models
==================

Users are weak references for this service: feedback and tasks point at them
(creator, assignee) but never own them. Team membership drives the sprint
permission checks.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class TeamRole(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True, max_length=255)
    first_name: str = Field(default="", max_length=255)
    last_name: str = Field(default="", max_length=255)
    active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Team(SQLModel, table=True):
    __tablename__ = "teams"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, nullable=True)
    active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserTeam(SQLModel, table=True):
    """Membership row. Active while leaved_at is null."""

    __tablename__ = "user_teams"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    team_id: int = Field(foreign_key="teams.id", index=True)
    role: str = Field(default=TeamRole.MEMBER.value, max_length=16)
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    leaved_at: Optional[datetime] = Field(default=None, nullable=True)
