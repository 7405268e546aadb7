"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "equipment",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("serial_number", sa.String(length=100), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("department", sa.String(length=100), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("owner", sa.String(length=255), nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("warranty_info", sa.String(length=255), nullable=True),
        sa.Column("is_scrapped", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("scrap_date", sa.Date(), nullable=True),
        sa.Column("scrap_reason", sa.Text(), nullable=True),
        sa.Column("scrap_origin", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint(
            "scrap_origin IN ('manual', 'workflow') OR scrap_origin IS NULL",
            name="chk_equipment_scrap_origin",
        ),
        sa.CheckConstraint(
            "is_scrapped OR (scrap_date IS NULL AND scrap_reason IS NULL AND scrap_origin IS NULL)",
            name="chk_equipment_scrap_fields",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_equipment_serial_number", "equipment", ["serial_number"], unique=True)
    op.create_index("ix_equipment_department", "equipment", ["department"], unique=False)
    op.create_index("ix_equipment_is_scrapped", "equipment", ["is_scrapped"], unique=False)

    op.create_table(
        "maintenance_teams",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_maintenance_teams_name", "maintenance_teams", ["name"], unique=True)

    op.create_table(
        "technicians",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("team_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("avatar", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["team_id"], ["maintenance_teams.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_technicians_team_id", "technicians", ["team_id"], unique=False)

    op.create_table(
        "work_centers",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=True),
        sa.Column("tag", sa.String(length=100), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("cost_per_hour", sa.Float(), nullable=True),
        sa.Column("capacity_efficiency", sa.Float(), nullable=True),
        sa.Column("oee_target", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "maintenance_requests",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("equipment_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("work_center_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("team_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("technician_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("stage", sa.String(length=20), nullable=False, server_default="new"),
        sa.Column("priority", sa.String(length=20), nullable=False, server_default="medium"),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("duration", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint("type IN ('corrective', 'preventive')", name="chk_request_type"),
        sa.CheckConstraint("stage IN ('new', 'in_progress', 'repaired', 'scrap')", name="chk_request_stage"),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high', 'urgent')", name="chk_request_priority"),
        sa.CheckConstraint("duration IS NULL OR duration >= 0", name="chk_request_duration_non_negative"),
        sa.CheckConstraint("equipment_id IS NULL OR work_center_id IS NULL", name="chk_request_single_target"),
        sa.ForeignKeyConstraint(["equipment_id"], ["equipment.id"]),
        sa.ForeignKeyConstraint(["work_center_id"], ["work_centers.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["team_id"], ["maintenance_teams.id"]),
        sa.ForeignKeyConstraint(["technician_id"], ["technicians.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_maintenance_requests_position", "maintenance_requests", ["position"], unique=False)
    op.create_index("ix_maintenance_requests_equipment_id", "maintenance_requests", ["equipment_id"], unique=False)
    op.create_index("ix_maintenance_requests_work_center_id", "maintenance_requests", ["work_center_id"], unique=False)
    op.create_index("ix_maintenance_requests_team_id", "maintenance_requests", ["team_id"], unique=False)
    op.create_index("ix_maintenance_requests_technician_id", "maintenance_requests", ["technician_id"], unique=False)
    op.create_index("ix_maintenance_requests_type", "maintenance_requests", ["type"], unique=False)
    op.create_index("ix_maintenance_requests_stage", "maintenance_requests", ["stage"], unique=False)
    op.create_index("ix_maintenance_requests_scheduled_date", "maintenance_requests", ["scheduled_date"], unique=False)
    op.create_index("idx_requests_equipment_stage", "maintenance_requests", ["equipment_id", "stage"], unique=False)

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("entity_type", sa.String(length=20), nullable=False),
        sa.Column("entity_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("entity_name", sa.String(length=255), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint(
            "action IN ('request_created', 'request_updated', 'request_stage_changed', "
            "'equipment_scrapped', 'equipment_unscrapped')",
            name="chk_audit_action",
        ),
        sa.CheckConstraint("entity_type IN ('request', 'equipment')", name="chk_audit_entity_type"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_events_action", "audit_events", ["action"], unique=False)
    op.create_index("ix_audit_events_created_at", "audit_events", ["created_at"], unique=False)
    op.create_index("idx_audit_events_entity", "audit_events", ["entity_type", "entity_id"], unique=False)


def downgrade() -> None:
    op.drop_table("audit_events")
    op.drop_table("maintenance_requests")
    op.drop_table("work_centers")
    op.drop_table("technicians")
    op.drop_table("maintenance_teams")
    op.drop_table("equipment")
