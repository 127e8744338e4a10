"""create users and maintenance_requests

Revision ID: 4b7e2c91a0d3
Revises:
Create Date: 2026-10-19 09:00:00.000000+00:00

"""

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision = "4b7e2c91a0d3"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("phone_number", sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column("apartment_number", sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    op.create_table(
        "maintenance_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("resident_id", sa.Integer(), nullable=False),
        sa.Column("technician_id", sa.Integer(), nullable=True),
        sa.Column("title", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=20), nullable=False),
        sa.Column("priority", sa.String(length=20), server_default="medium", nullable=False),
        sa.Column("status", sa.String(length=20), server_default="new", nullable=False),
        sa.Column("media_urls", sa.JSON(), nullable=False),
        sa.Column("work_notes", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.ForeignKeyConstraint(["resident_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["technician_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_maintenance_requests_resident_id", "maintenance_requests", ["resident_id"], unique=False)
    op.create_index("ix_maintenance_requests_technician_id", "maintenance_requests", ["technician_id"], unique=False)
    op.create_index("ix_maintenance_requests_status", "maintenance_requests", ["status"], unique=False)
    op.create_index("ix_maintenance_requests_category", "maintenance_requests", ["category"], unique=False)
    op.create_index("ix_maintenance_requests_created_at", "maintenance_requests", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_maintenance_requests_created_at", table_name="maintenance_requests")
    op.drop_index("ix_maintenance_requests_category", table_name="maintenance_requests")
    op.drop_index("ix_maintenance_requests_status", table_name="maintenance_requests")
    op.drop_index("ix_maintenance_requests_technician_id", table_name="maintenance_requests")
    op.drop_index("ix_maintenance_requests_resident_id", table_name="maintenance_requests")
    op.drop_table("maintenance_requests")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_table("users")
