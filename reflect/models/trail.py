"""
Trail Model
===========

Append-only audit rows: who did what to which entity.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Trail(SQLModel, table=True):
    __tablename__ = "trails"

    id: Optional[int] = Field(default=None, primary_key=True)
    action: str = Field(max_length=128)
    action_item: str = Field(max_length=128)
    action_item_id: str = Field(max_length=64)
    action_by_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
