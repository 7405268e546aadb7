"""request position counter

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "request_positions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    # Renumber existing requests so positions are unique before the index goes on.
    bind = op.get_bind()
    rows = bind.execute(
        sa.text("SELECT id FROM maintenance_requests ORDER BY position, created_at, id")
    ).fetchall()
    for position, row in enumerate(rows, start=1):
        bind.execute(
            sa.text("UPDATE maintenance_requests SET position = :position WHERE id = :id"),
            {"position": position, "id": row[0]},
        )

    if rows:
        bind.execute(sa.text("INSERT INTO request_positions (id) VALUES (:id)"), {"id": len(rows)})
        if bind.dialect.name == "postgresql":
            bind.execute(
                sa.text("SELECT setval(pg_get_serial_sequence('request_positions', 'id'), :id)"),
                {"id": len(rows)},
            )

    op.drop_index("ix_maintenance_requests_position", table_name="maintenance_requests")
    op.create_index("ix_maintenance_requests_position", "maintenance_requests", ["position"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_maintenance_requests_position", table_name="maintenance_requests")
    op.create_index("ix_maintenance_requests_position", "maintenance_requests", ["position"], unique=False)
    op.drop_table("request_positions")
