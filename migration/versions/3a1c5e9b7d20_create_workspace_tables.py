"""create workspace tables

Revision ID: 3a1c5e9b7d20
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3a1c5e9b7d20"
down_revision = None
branch_labels = None
depends_on = None

# SAEnum persists member names
billing_model = sa.Enum("HOURLY", "RETAINER", "PROJECT", name="billingmodel")
client_status = sa.Enum("ACTIVE", "PROSPECT", "ARCHIVED", name="clientstatus")
project_status = sa.Enum("NOT_STARTED", "IN_PROGRESS", "ON_HOLD", "COMPLETE", name="projectstatus")
allocation_type = sa.Enum("GENERAL", "RETAINER", "PROJECT", name="allocationtype")
note_type = sa.Enum("GENERAL", "MEETING", "DECISION", "ACTION_ITEM", "FEEDBACK", name="notetype")


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("model", billing_model, nullable=False),
        sa.Column("rate", sa.Float(), nullable=True),
        sa.Column("status", client_status, nullable=False),
        sa.Column("contact_name", sa.String(), nullable=True),
        sa.Column("contact_email", sa.String(), nullable=True),
        sa.Column("website", sa.String(), nullable=True),
        sa.Column("show_portal_costs", sa.Boolean(), nullable=True),
        sa.Column("retainer_total", sa.Float(), nullable=True),
        sa.Column("retainer_remaining", sa.Float(), nullable=True),
        sa.Column("monthly_earnings", sa.Float(), nullable=True),
        sa.Column("lifetime_revenue", sa.Float(), nullable=True),
        sa.Column("hours_logged", sa.Float(), nullable=True),
        sa.Column("last_session_date", sa.Date(), nullable=True),
        sa.Column("true_hourly_rate", sa.Float(), nullable=True),
        sa.Column("external_links", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", project_status, nullable=False),
        sa.Column("estimated_hours", sa.Float(), nullable=True),
        sa.Column("total_value", sa.Float(), nullable=True),
        sa.Column("hours", sa.Float(), nullable=True),
        sa.Column("revenue", sa.Float(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("milestones", sa.JSON(), nullable=True),
        sa.Column("external_links", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_projects_client_id", "projects", ["client_id"])

    op.create_table(
        "work_sessions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("client_name", sa.String(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("duration", sa.Float(), nullable=False),
        sa.Column("revenue", sa.Float(), nullable=True),
        sa.Column("billable", sa.Boolean(), nullable=True),
        sa.Column("task", sa.String(), nullable=True),
        sa.Column("work_tags", sa.JSON(), nullable=True),
        sa.Column("allocation_type", allocation_type, nullable=False),
        sa.Column("project_id", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_work_sessions_client_id", "work_sessions", ["client_id"])
    op.create_index("idx_work_sessions_project_id", "work_sessions", ["project_id"])

    op.create_table(
        "client_notes",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("client_id", sa.String(), nullable=False),
        sa.Column("content", sa.String(), nullable=False),
        sa.Column("type", note_type, nullable=False),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("project_id", sa.String(), nullable=True),
        sa.Column("is_pinned", sa.Boolean(), nullable=True),
        sa.Column("is_resolved", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_client_notes_client_id", "client_notes", ["client_id"])

    op.create_table(
        "workspace_settings",
        sa.Column("section", sa.String(length=64), nullable=False),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("section"),
    )


def downgrade() -> None:
    op.drop_table("workspace_settings")
    op.drop_index("idx_client_notes_client_id", table_name="client_notes")
    op.drop_table("client_notes")
    op.drop_index("idx_work_sessions_project_id", table_name="work_sessions")
    op.drop_index("idx_work_sessions_client_id", table_name="work_sessions")
    op.drop_table("work_sessions")
    op.drop_index("idx_projects_client_id", table_name="projects")
    op.drop_table("projects")
    op.drop_table("clients")
