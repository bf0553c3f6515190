"""initial schema: users, intervals, compositions, composition_intervals

Revision ID: 0001_initial_schema
Revises:
Create Date: 2024-05-01 12:00:00

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("login", sa.String(length=64), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("is_moderator", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_login", "users", ["login"], unique=True)

    op.create_table(
        "intervals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("tone", sa.Numeric(precision=10, scale=1), nullable=False),
        sa.Column("photo_url", sa.String(length=512), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_intervals_is_deleted", "intervals", ["is_deleted"])

    op.create_table(
        "compositions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("creator_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("moderator_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Draft"),
        sa.Column("belonging", sa.String(length=32), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("date_create", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("date_update", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("date_finish", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_compositions_creator_id", "compositions", ["creator_id"])
    op.create_index("ix_compositions_status", "compositions", ["status"])
    op.create_index(
        "uq_compositions_one_draft_per_creator",
        "compositions",
        ["creator_id"],
        unique=True,
        postgresql_where=sa.text("status = 'Draft'"),
        sqlite_where=sa.text("status = 'Draft'"),
    )

    op.create_table(
        "composition_intervals",
        sa.Column("composition_id", sa.Integer(),
                  sa.ForeignKey("compositions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("interval_id", sa.Integer(), sa.ForeignKey("intervals.id"), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint("amount >= 1", name="ck_composition_intervals_amount_positive"),
        sa.PrimaryKeyConstraint("composition_id", "interval_id"),
    )


def downgrade() -> None:
    op.drop_table("composition_intervals")
    op.drop_index("uq_compositions_one_draft_per_creator", table_name="compositions")
    op.drop_index("ix_compositions_status", table_name="compositions")
    op.drop_index("ix_compositions_creator_id", table_name="compositions")
    op.drop_table("compositions")
    op.drop_index("ix_intervals_is_deleted", table_name="intervals")
    op.drop_table("intervals")
    op.drop_index("ix_users_login", table_name="users")
    op.drop_table("users")
