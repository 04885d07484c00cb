"""
API tests for the highlights, notes and goals routers.

Covers the permission gate (403 before any service call), the 400 failure
envelope, request validation, and audit trail writes.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from reflect.core.database import get_engine
from reflect.main import app
from reflect.models import RetrospectiveFeedback, SprintStatus, Trail
from reflect.services.permission_service import get_permission_service
from reflect.services.retrospective_feedback_service import get_feedback_service
from conftest import day


@pytest.fixture
def client():
    # No lifespan: the test store is created by conftest, not by migrations
    yield TestClient(app)
    app.dependency_overrides.clear()


def _base(sprint, retro) -> str:
    return f"/api/v1/sprints/{sprint.id}/retrospectives/{retro.id}"


def _trails():
    with Session(get_engine()) as session:
        return [(t.action, t.action_item, t.action_item_id) for t in session.exec(select(Trail).order_by(Trail.id)).all()]


def _feedback_count() -> int:
    with Session(get_engine()) as session:
        return len(session.exec(select(RetrospectiveFeedback)).all())


# ═══════════════════════════════════════════════════════════════════════
# Highlights
# ═══════════════════════════════════════════════════════════════════════

class TestHighlights:

    def test_add_returns_201_and_records_trail(self, client, auth_headers, member, retro, sprint):
        resp = client.post(
            f"{_base(sprint, retro)}/highlights/",
            json={"text": "Zero downtime deploy", "scope": "team"},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["type"] == "highlight"
        assert body["text"] == "Zero downtime deploy"
        assert body["added_at"].startswith("2026-03-01")
        assert body["resolved_at"].startswith("2026-03-10")
        assert body["created_by"]["id"] == member.id

        assert _trails() == [("Added Highlight", "Retrospective Feedback", str(body["id"]))]

    def test_list(self, client, auth_headers, retro, sprint, make_feedback):
        make_feedback("highlight", day(2), resolved_at=day(10), text="one")
        make_feedback("note", day(2), resolved_at=day(10), text="not a highlight")

        resp = client.get(f"{_base(sprint, retro)}/highlights/", headers=auth_headers)
        assert resp.status_code == 200
        assert [f["text"] for f in resp.json()["feedbacks"]] == ["one"]
        assert _trails() == []

    def test_update_records_trail(self, client, auth_headers, retro, sprint, make_feedback):
        highlight = make_feedback("highlight", day(2), resolved_at=day(10))
        resp = client.put(
            f"{_base(sprint, retro)}/highlights/{highlight.id}/",
            json={"text": "edited"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["text"] == "edited"
        assert _trails() == [("Updated Highlight", "Retrospective Feedback", str(highlight.id))]

    def test_update_with_expected_at_fails_with_envelope(self, client, auth_headers, retro, sprint, make_feedback):
        highlight = make_feedback("highlight", day(2), resolved_at=day(10))
        resp = client.put(
            f"{_base(sprint, retro)}/highlights/{highlight.id}/",
            json={"expected_at": "2026-04-01T00:00:00"},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert resp.json() == {
            "message": "Failed to update highlight",
            "error": "expectedAt can be updated only for goal type retrospective feedback",
        }
        assert _trails() == []

    def test_update_unknown_highlight(self, client, auth_headers, retro, sprint):
        resp = client.put(f"{_base(sprint, retro)}/highlights/4242/", json={}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "retrospective feedback not found"

    def test_outsider_forbidden_and_nothing_created(self, client, outsider, retro, sprint):
        resp = client.post(
            f"{_base(sprint, retro)}/highlights/",
            json={"text": "sneaky"},
            headers={"X-User-ID": str(outsider.id)},
        )
        assert resp.status_code == 403
        assert resp.json() == {}
        assert _feedback_count() == 0

    def test_draft_sprint_forbidden(self, client, auth_headers, retro, make_sprint):
        draft = make_sprint(day(1), day(10), status=SprintStatus.DRAFT.value)
        resp = client.get(f"{_base(draft, retro)}/highlights/", headers=auth_headers)
        assert resp.status_code == 403

    def test_completed_sprint_is_read_only(self, client, auth_headers, retro, make_sprint):
        done = make_sprint(day(1), day(10), status=SprintStatus.COMPLETED.value)
        assert client.get(f"{_base(done, retro)}/highlights/", headers=auth_headers).status_code == 200
        resp = client.post(f"{_base(done, retro)}/highlights/", json={"text": "late"}, headers=auth_headers)
        assert resp.status_code == 403

    def test_missing_identity_is_401(self, client, retro, sprint):
        resp = client.get(f"{_base(sprint, retro)}/highlights/")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "REF-SEC-001"

    def test_inactive_user_is_401(self, client, make_user, retro, sprint):
        ghost = make_user("ghost@example.com", active=False)
        resp = client.get(f"{_base(sprint, retro)}/highlights/", headers={"X-User-ID": str(ghost.id)})
        assert resp.status_code == 401

    def test_malformed_json_is_400(self, client, auth_headers, retro, sprint):
        resp = client.post(
            f"{_base(sprint, retro)}/highlights/",
            content="{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid request data"
        assert _feedback_count() == 0

    def test_unknown_scope_is_400(self, client, auth_headers, retro, sprint):
        resp = client.post(
            f"{_base(sprint, retro)}/highlights/", json={"scope": "galaxy"}, headers=auth_headers
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid request data"

    def test_permission_denial_never_reaches_service(self, client, auth_headers, retro, sprint):
        permissions = MagicMock()
        permissions.can_access_retrospective_feedback.return_value = True
        permissions.user_can_edit_sprint.return_value = False
        service = MagicMock()
        app.dependency_overrides[get_permission_service] = lambda: permissions
        app.dependency_overrides[get_feedback_service] = lambda: service

        resp = client.post(f"{_base(sprint, retro)}/highlights/", json={"text": "x"}, headers=auth_headers)
        assert resp.status_code == 403
        service.add.assert_not_called()

    def test_correlation_headers_are_echoed(self, client, auth_headers, retro, sprint):
        resp = client.get(
            f"{_base(sprint, retro)}/highlights/",
            headers={**auth_headers, "X-Request-ID": "req-42"},
        )
        assert resp.headers["x-request-id"] == "req-42"
        assert resp.headers["x-correlation-id"]


# ═══════════════════════════════════════════════════════════════════════
# Notes
# ═══════════════════════════════════════════════════════════════════════

class TestNotes:

    def test_add_and_list(self, client, auth_headers, retro, sprint):
        resp = client.post(f"{_base(sprint, retro)}/notes/", json={"text": "pairing helped"}, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.json()["type"] == "note"
        assert resp.json()["resolved_at"] is not None

        listed = client.get(f"{_base(sprint, retro)}/notes/", headers=auth_headers)
        assert [f["text"] for f in listed.json()["feedbacks"]] == ["pairing helped"]
        assert _trails()[0][0] == "Added Note"


# ═══════════════════════════════════════════════════════════════════════
# Goals
# ═══════════════════════════════════════════════════════════════════════

class TestGoals:

    def test_goal_lifecycle(self, client, auth_headers, member, retro, sprint):
        base = _base(sprint, retro)
        created = client.post(f"{base}/goals/", json={"text": "Cut CI time"}, headers=auth_headers)
        assert created.status_code == 201
        goal_id = created.json()["id"]
        assert created.json()["resolved_at"] is None

        updated = client.put(
            f"{base}/goals/{goal_id}/",
            json={"expected_at": "2026-03-20T00:00:00", "assignee_id": member.id},
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["assignee"]["id"] == member.id

        added = client.get(f"{base}/goals/", params={"goal_type": "added"}, headers=auth_headers)
        assert [g["id"] for g in added.json()["feedbacks"]] == [goal_id]

        resolved = client.post(f"{base}/goals/{goal_id}/resolve/", headers=auth_headers)
        assert resolved.status_code == 200
        assert resolved.json()["resolved_at"].startswith("2026-03-10")

        locked = client.put(f"{base}/goals/{goal_id}/", json={"text": "too late"}, headers=auth_headers)
        assert locked.status_code == 400
        assert locked.json() == {"message": "Failed to update goal", "error": "can not update resolved goal"}

        completed = client.get(f"{base}/goals/", params={"goal_type": "completed"}, headers=auth_headers)
        assert [g["id"] for g in completed.json()["feedbacks"]] == [goal_id]

        reopened = client.delete(f"{base}/goals/{goal_id}/resolve/", headers=auth_headers)
        assert reopened.status_code == 200
        assert reopened.json()["resolved_at"] is None

        assert [action for action, _, _ in _trails()] == [
            "Added Goal",
            "Updated Goal",
            "Resolved Goal",
            "Unresolved Goal",
        ]

    def test_expected_at_without_offset_is_accepted(self, client, auth_headers, retro, sprint):
        base = _base(sprint, retro)
        goal_id = client.post(f"{base}/goals/", json={"text": "Ship v2"}, headers=auth_headers).json()["id"]

        resp = client.put(
            f"{base}/goals/{goal_id}/",
            json={"expected_at": "2026-03-20T00:00:00"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["expected_at"].startswith("2026-03-20T00:00:00")

        with Session(get_engine()) as session:
            stored = session.get(RetrospectiveFeedback, goal_id)
        assert stored.expected_at.replace(tzinfo=None) == day(20).replace(tzinfo=None)

    def test_unknown_goal_type(self, client, auth_headers, retro, sprint):
        resp = client.get(f"{_base(sprint, retro)}/goals/", params={"goal_type": "overdue"}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json() == {"message": "Failed to fetch goals", "error": "invalid goal type"}

    def test_goal_type_is_required(self, client, auth_headers, retro, sprint):
        resp = client.get(f"{_base(sprint, retro)}/goals/", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid request data"

    def test_resolving_a_note_fails(self, client, auth_headers, retro, sprint, make_feedback):
        note = make_feedback("note", day(2), resolved_at=day(10))
        resp = client.post(f"{_base(sprint, retro)}/goals/{note.id}/resolve/", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Failed to resolve goal"
        assert resp.json()["error"] == "only goal typed retrospective feedback could be resolved or unresolved"
        assert _trails() == []
