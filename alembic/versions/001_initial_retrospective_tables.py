"""Initial retrospective tables: users, teams, retrospectives, sprints,
feedback, sprint tasks, trails

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # --- teams ---
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String, nullable=True),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )

    # --- user_teams ---
    op.create_table(
        "user_teams",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("team_id", sa.Integer, sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("role", sa.String(16), nullable=False, server_default="member"),
        sa.Column("joined_at", sa.DateTime, nullable=False),
        sa.Column("leaved_at", sa.DateTime, nullable=True),
    )
    op.create_index("ix_user_teams_user_id", "user_teams", ["user_id"])
    op.create_index("ix_user_teams_team_id", "user_teams", ["team_id"])

    # --- retrospectives ---
    op.create_table(
        "retrospectives",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("project_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("team_id", sa.Integer, sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("created_by_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_retrospectives_team_id", "retrospectives", ["team_id"])

    # --- sprints ---
    op.create_table(
        "sprints",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("retrospective_id", sa.Integer, sa.ForeignKey("retrospectives.id"), nullable=False),
        sa.Column("start_date", sa.DateTime, nullable=False),
        sa.Column("end_date", sa.DateTime, nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="draft"),
        sa.Column("created_by_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.Column("deleted_at", sa.DateTime, nullable=True),
    )
    op.create_index("ix_sprints_retrospective_id", "sprints", ["retrospective_id"])

    # --- retrospective_feedbacks ---
    op.create_table(
        "retrospective_feedbacks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("retrospective_id", sa.Integer, sa.ForeignKey("retrospectives.id"), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("sub_type", sa.String(64), nullable=True),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("scope", sa.String(16), nullable=False, server_default="team"),
        sa.Column("added_at", sa.DateTime, nullable=False),
        sa.Column("expected_at", sa.DateTime, nullable=True),
        sa.Column("resolved_at", sa.DateTime, nullable=True),
        sa.Column("assignee_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_by_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )
    op.create_index(
        "ix_retrospective_feedbacks_retrospective_id", "retrospective_feedbacks", ["retrospective_id"]
    )
    op.create_index("ix_retrospective_feedbacks_type", "retrospective_feedbacks", ["type"])

    # --- sprint_tasks ---
    op.create_table(
        "sprint_tasks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("sprint_id", sa.Integer, sa.ForeignKey("sprints.id"), nullable=False),
        sa.Column("key", sa.String(64), nullable=False),
        sa.Column("summary", sa.String(512), nullable=False, server_default=""),
        sa.Column("type", sa.String(32), nullable=False, server_default="task"),
        sa.Column("status", sa.String(32), nullable=False, server_default=""),
        sa.Column("priority", sa.String(32), nullable=False, server_default=""),
        sa.Column("assignee_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("estimate", sa.Float, nullable=False, server_default="0"),
        sa.Column("points_earned", sa.Float, nullable=False, server_default="0"),
        sa.Column("rating", sa.Integer, nullable=True),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column("done_at", sa.DateTime, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_sprint_tasks_sprint_id", "sprint_tasks", ["sprint_id"])

    # --- trails ---
    op.create_table(
        "trails",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("action", sa.String(128), nullable=False),
        sa.Column("action_item", sa.String(128), nullable=False),
        sa.Column("action_item_id", sa.String(64), nullable=False),
        sa.Column("action_by_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_trails_action_by_id", "trails", ["action_by_id"])


def downgrade() -> None:
    op.drop_table("trails")
    op.drop_table("sprint_tasks")
    op.drop_table("retrospective_feedbacks")
    op.drop_table("sprints")
    op.drop_table("retrospectives")
    op.drop_table("user_teams")
    op.drop_table("teams")
    op.drop_table("users")
