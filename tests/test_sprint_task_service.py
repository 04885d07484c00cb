"""Tests for SprintTaskService: lookup scoping, assessment rules, done/undone."""

import pytest

from reflect.core.errors import ReflectError
from reflect.core.errors.registry import error_registry
from reflect.models import Retrospective
from reflect.schemas.sprint_task import SprintTaskUpdate
from reflect.services.sprint_task_service import SprintTaskService
from conftest import day


@pytest.fixture
def service(db):
    return SprintTaskService(db)


def test_list_orders_by_key(service, retro, sprint, make_task, make_sprint):
    make_task(sprint, "REF-2")
    make_task(sprint, "REF-1")
    make_task(make_sprint(day(11), day(20)), "REF-3")

    tasks, status_code = service.list(str(retro.id), str(sprint.id))
    assert status_code == 200
    assert [t.key for t in tasks.tasks] == ["REF-1", "REF-2"]


def test_get_hydrates_assignee(service, member, retro, sprint, make_task):
    task = make_task(sprint, "REF-1", assignee_id=member.id)
    read, status_code = service.get(str(task.id), str(retro.id), str(sprint.id))
    assert status_code == 200
    assert read.assignee.email == member.email
    assert read.is_done is False


def test_get_task_from_another_sprint(service, retro, sprint, make_sprint, make_task):
    foreign = make_task(make_sprint(day(11), day(20)), "REF-9")
    with pytest.raises(ReflectError) as exc_info:
        service.get(str(foreign.id), str(retro.id), str(sprint.id))
    assert exc_info.value.code == "REF-DB-003"
    assert error_registry.lookup("REF-DB-003").http_status == 404


def test_sprint_must_belong_to_retrospective(service, db, member, team, sprint, make_task):
    other = Retrospective(title="Other", team_id=team.id, created_by_id=member.id)
    db.add(other)
    db.commit()
    db.refresh(other)
    task = make_task(sprint, "REF-1")

    with pytest.raises(ReflectError) as exc_info:
        service.get(str(task.id), str(other.id), str(sprint.id))
    assert exc_info.value.code == "REF-DB-001"


def test_update_applies_supplied_fields_only(service, retro, sprint, make_task):
    task = make_task(sprint, "REF-1", estimate=5, comment="first pass")
    read, _ = service.update(str(task.id), str(retro.id), str(sprint.id), SprintTaskUpdate(rating=3))
    assert read.rating == 3
    assert read.comment == "first pass"

    read, _ = service.update(
        str(task.id), str(retro.id), str(sprint.id), SprintTaskUpdate(points_earned=5, comment="done well")
    )
    assert read.points_earned == 5
    assert read.comment == "done well"
    assert read.rating == 3


def test_points_earned_cannot_exceed_estimate(service, retro, sprint, make_task):
    task = make_task(sprint, "REF-1", estimate=2)
    with pytest.raises(ReflectError) as exc_info:
        service.update(str(task.id), str(retro.id), str(sprint.id), SprintTaskUpdate(points_earned=2.5))
    assert exc_info.value.code == "REF-TSK-001"


def test_rating_range_is_validated():
    with pytest.raises(ValueError):
        SprintTaskUpdate(rating=5)


def test_mark_done_uses_sprint_end_and_keeps_first_date(service, retro, sprint, make_sprint, make_task):
    task = make_task(sprint, "REF-1")
    read, status_code = service.mark_done(str(task.id), str(retro.id), str(sprint.id))
    assert status_code == 200
    assert read.done_at == day(10)
    assert read.is_done is True

    read, _ = service.mark_done(str(task.id), str(retro.id), str(sprint.id))
    assert read.done_at == day(10)


def test_mark_undone(service, retro, sprint, make_task):
    task = make_task(sprint, "REF-1", done_at=day(4))
    read, _ = service.mark_undone(str(task.id), str(retro.id), str(sprint.id))
    assert read.done_at is None

    read, _ = service.mark_undone(str(task.id), str(retro.id), str(sprint.id))
    assert read.is_done is False


def test_non_numeric_task_id(service, retro, sprint):
    with pytest.raises(ReflectError) as exc_info:
        service.get("REF-1", str(retro.id), str(sprint.id))
    assert exc_info.value.code == "REF-API-004"
