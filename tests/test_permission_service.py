"""Tests for PermissionService capability checks."""

from datetime import datetime, timezone

import pytest
from sqlmodel import select

from reflect.models import Retrospective, SprintStatus, UserTeam
from reflect.services.permission_service import PermissionService
from conftest import day


@pytest.fixture
def permissions(db):
    return PermissionService(db)


class TestFeedbackAccess:

    def test_active_sprint(self, permissions, sprint):
        assert permissions.can_access_retrospective_feedback(str(sprint.id)) is True

    def test_completed_sprint(self, permissions, make_sprint):
        sprint = make_sprint(day(1), day(10), status=SprintStatus.COMPLETED.value)
        assert permissions.can_access_retrospective_feedback(str(sprint.id)) is True

    def test_draft_sprint(self, permissions, make_sprint):
        sprint = make_sprint(day(1), day(10), status=SprintStatus.DRAFT.value)
        assert permissions.can_access_retrospective_feedback(str(sprint.id)) is False

    def test_deleted_sprint(self, permissions, db, sprint):
        sprint.deleted_at = datetime.now(timezone.utc)
        db.add(sprint)
        db.commit()
        assert permissions.can_access_retrospective_feedback(str(sprint.id)) is False

    @pytest.mark.parametrize("sprint_id", ["999", "abc", "", "-1"])
    def test_missing_or_malformed_sprint(self, permissions, sprint_id):
        assert permissions.can_access_retrospective_feedback(sprint_id) is False


class TestSprintAccess:

    def test_member_can_access_and_edit(self, permissions, member, retro, sprint):
        assert permissions.user_can_access_sprint(str(retro.id), str(sprint.id), member.id) is True
        assert permissions.user_can_edit_sprint(str(retro.id), str(sprint.id), member.id) is True

    def test_outsider_denied(self, permissions, outsider, retro, sprint):
        assert permissions.user_can_access_sprint(str(retro.id), str(sprint.id), outsider.id) is False
        assert permissions.user_can_edit_sprint(str(retro.id), str(sprint.id), outsider.id) is False

    def test_former_member_denied(self, permissions, db, member, retro, sprint):
        membership = db.exec(
            select(UserTeam).where(UserTeam.user_id == member.id).where(UserTeam.team_id == retro.team_id)
        ).one()
        membership.leaved_at = datetime.now(timezone.utc)
        db.add(membership)
        db.commit()
        assert permissions.user_can_access_sprint(str(retro.id), str(sprint.id), member.id) is False

    def test_completed_sprint_is_read_only(self, permissions, member, retro, make_sprint):
        sprint = make_sprint(day(1), day(10), status=SprintStatus.COMPLETED.value)
        assert permissions.user_can_access_sprint(str(retro.id), str(sprint.id), member.id) is True
        assert permissions.user_can_edit_sprint(str(retro.id), str(sprint.id), member.id) is False

    def test_sprint_of_another_retrospective(self, permissions, db, member, team, sprint):
        other = Retrospective(title="Other", team_id=team.id, created_by_id=member.id)
        db.add(other)
        db.commit()
        db.refresh(other)
        assert permissions.user_can_access_sprint(str(other.id), str(sprint.id), member.id) is False

    def test_malformed_retro_id(self, permissions, member, sprint):
        assert permissions.user_can_access_sprint("retro", str(sprint.id), member.id) is False


class TestSprintTaskAccess:

    def test_task_in_sprint(self, permissions, member, retro, sprint, make_task):
        task = make_task(sprint, "REF-1")
        assert permissions.user_can_access_sprint_task(str(retro.id), str(sprint.id), str(task.id), member.id)
        assert permissions.user_can_edit_sprint_task(str(retro.id), str(sprint.id), str(task.id), member.id)

    def test_task_in_other_sprint(self, permissions, member, retro, sprint, make_sprint, make_task):
        task = make_task(make_sprint(day(11), day(20)), "REF-1")
        assert not permissions.user_can_access_sprint_task(str(retro.id), str(sprint.id), str(task.id), member.id)
        assert not permissions.user_can_edit_sprint_task(str(retro.id), str(sprint.id), str(task.id), member.id)

    def test_completed_sprint_task_not_editable(self, permissions, member, retro, make_sprint, make_task):
        sprint = make_sprint(day(1), day(10), status=SprintStatus.COMPLETED.value)
        task = make_task(sprint, "REF-1")
        assert permissions.user_can_access_sprint_task(str(retro.id), str(sprint.id), str(task.id), member.id)
        assert not permissions.user_can_edit_sprint_task(str(retro.id), str(sprint.id), str(task.id), member.id)

    def test_outsider_denied(self, permissions, outsider, retro, sprint, make_task):
        task = make_task(sprint, "REF-1")
        assert not permissions.user_can_access_sprint_task(str(retro.id), str(sprint.id), str(task.id), outsider.id)
