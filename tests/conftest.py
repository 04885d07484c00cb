"""
Pytest configuration for Reflect tests.
Points the store and log directory at a temp dir before any app import.
"""

import os
import tempfile
from datetime import datetime, timezone

_test_data_dir = tempfile.mkdtemp(prefix="reflect_test_")
os.environ.setdefault("REFLECT_DATA_DIRECTORY", _test_data_dir)
os.environ.setdefault("REFLECT_LOG_DIRECTORY", os.path.join(_test_data_dir, "logs"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_test_data_dir}/test.db")

import pytest
from sqlmodel import Session, SQLModel

from reflect.core.database import get_engine

# Import all models so their tables are registered on SQLModel.metadata
import reflect.models  # noqa: F401
from reflect.models import (
    Retrospective,
    RetrospectiveFeedback,
    Sprint,
    SprintStatus,
    SprintTask,
    Team,
    User,
    UserTeam,
)

SQLModel.metadata.create_all(get_engine())

# Load error registry so ReflectError returns correct HTTP status codes
from reflect.core.errors.registry import error_registry
error_registry.load()


def day(n: int) -> datetime:
    """Midnight UTC of day *n* of the test month."""
    return datetime(2026, 3, n, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clean_store():
    """Every test starts with empty tables and a cold identity cache."""
    from reflect.auth.user_auth import identity_cache

    identity_cache.clear()
    yield
    identity_cache.clear()
    with Session(get_engine()) as session:
        for table in reversed(SQLModel.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()


@pytest.fixture
def db():
    with Session(get_engine()) as session:
        yield session


def _persist(db, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def make_user(db):
    def _make(email: str, first_name: str = "", last_name: str = "", active: bool = True) -> User:
        return _persist(db, User(email=email, first_name=first_name, last_name=last_name, active=active))
    return _make


@pytest.fixture
def member(make_user):
    return make_user("ada@example.com", "Ada", "Lovelace")


@pytest.fixture
def outsider(make_user):
    return make_user("eve@example.com", "Eve", "Outsider")


@pytest.fixture
def team(db, member):
    team = _persist(db, Team(name="Platform"))
    _persist(db, UserTeam(user_id=member.id, team_id=team.id))
    return team


@pytest.fixture
def retro(db, team, member):
    return _persist(db, Retrospective(title="Platform retro", team_id=team.id, created_by_id=member.id))


@pytest.fixture
def make_sprint(db, retro, member):
    def _make(start: datetime, end: datetime, status: str = SprintStatus.ACTIVE.value, retrospective_id=None) -> Sprint:
        return _persist(
            db,
            Sprint(
                title=f"Sprint {start:%m-%d}",
                retrospective_id=retrospective_id or retro.id,
                start_date=start,
                end_date=end,
                status=status,
                created_by_id=member.id,
            ),
        )
    return _make


@pytest.fixture
def sprint(make_sprint):
    return make_sprint(day(1), day(10))


@pytest.fixture
def make_feedback(db, retro, member):
    """Insert feedback directly, bypassing the service's dating rules."""
    def _make(type: str, added_at: datetime, resolved_at=None, retrospective_id=None, text: str = "") -> RetrospectiveFeedback:
        return _persist(
            db,
            RetrospectiveFeedback(
                retrospective_id=retrospective_id or retro.id,
                type=type,
                text=text,
                added_at=added_at,
                resolved_at=resolved_at,
                created_by_id=member.id,
            ),
        )
    return _make


@pytest.fixture
def make_task(db):
    def _make(sprint: Sprint, key: str, estimate: float = 3.0, **fields) -> SprintTask:
        return _persist(db, SprintTask(sprint_id=sprint.id, key=key, summary=f"Work on {key}", estimate=estimate, **fields))
    return _make


@pytest.fixture
def auth_headers(member):
    return {"X-User-ID": str(member.id)}
