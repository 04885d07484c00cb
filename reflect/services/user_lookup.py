"""Batch user loading for hydrating assignee / creator references."""

from typing import Dict, Iterable, Optional

from sqlmodel import Session, col, select

from reflect.models.user import User


def load_users(db: Session, user_ids: Iterable[Optional[int]]) -> Dict[int, User]:
    """Return {id: User} for the given ids in a single query. None ids are skipped."""
    wanted = {uid for uid in user_ids if uid is not None}
    if not wanted:
        return {}
    users = db.exec(select(User).where(col(User.id).in_(wanted))).all()
    return {user.id: user for user in users}


def parse_id(value) -> Optional[int]:
    """Parse a path identifier; None when it is not a positive integer."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None
