"""Create catalog and practice tables for the practice builder.

Revision ID: 20261019_create_practice_builder_tables
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "20261019_create_practice_builder_tables"
down_revision = None
branch_labels = None
depends_on = None

DIFFICULTIES = ("Beginner", "Intermediate", "Advanced")
CATEGORIES = ("Passing", "Attacking", "Setting", "Serving", "Defense", "Blocking", "Competition")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=True, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "drills",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("difficulty", sa.Enum(*DIFFICULTIES, name="drill_difficulty_enum"), nullable=False),
        sa.Column("category", sa.Enum(*CATEGORIES, name="drill_category_enum"), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("diagram_url", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("duration_minutes > 0", name="ck_drills_duration_positive"),
    )
    op.create_index("ix_drills_user_id", "drills", ["user_id"])
    op.create_index("ix_drills_created_at", "drills", ["created_at"])

    op.create_table(
        "practices",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("practice_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_practices_user_id", "practices", ["user_id"])
    op.create_index("ix_practices_practice_date", "practices", ["practice_date"])

    op.create_table(
        "practice_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "practice_id",
            sa.String(36),
            sa.ForeignKey("practices.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("drill_id", sa.String(36), sa.ForeignKey("drills.id"), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.UniqueConstraint("practice_id", "sort_order", name="uq_practice_items_practice_sort"),
    )
    op.create_index("ix_practice_items_practice_id", "practice_items", ["practice_id"])
    op.create_index("ix_practice_items_drill_id", "practice_items", ["drill_id"])


def downgrade() -> None:
    op.drop_table("practice_items")
    op.drop_table("practices")
    op.drop_table("drills")
    op.drop_table("users")
    sa.Enum(name="drill_category_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="drill_difficulty_enum").drop(op.get_bind(), checkfirst=True)
