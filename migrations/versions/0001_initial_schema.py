"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

habits, check_ins (unique per habit+day, cascades on habit delete)
and weight_entries (unique per day). Day columns hold "YYYY-MM-DD" keys.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- habits ---
    op.create_table(
        "habits",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("target_days", sa.Integer(), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("best_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_check_in_date", sa.String(10), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.String(10), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("target_days > 0", name="ck_habit_target_positive"),
        sa.CheckConstraint("current_streak >= 0", name="ck_habit_streak_non_negative"),
        sa.CheckConstraint("best_streak >= current_streak", name="ck_habit_best_ge_current"),
    )
    op.create_index("ix_habits_id", "habits", ["id"])
    op.create_index("ix_habits_created_at", "habits", ["created_at"])

    # --- check_ins ---
    op.create_table(
        "check_ins",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("habit_id", sa.Integer(), nullable=False),
        sa.Column("day", sa.String(10), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="completed"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["habit_id"], ["habits.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("habit_id", "day", name="uq_check_in_habit_day"),
    )
    op.create_index("ix_check_ins_id", "check_ins", ["id"])
    op.create_index("ix_check_ins_habit_id", "check_ins", ["habit_id"])
    op.create_index("ix_check_ins_day", "check_ins", ["day"])

    # --- weight_entries ---
    op.create_table(
        "weight_entries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("day", sa.String(10), nullable=False),
        sa.Column("weight", sa.Numeric(6, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_weight_entries_id", "weight_entries", ["id"])
    op.create_index("ix_weight_entries_day", "weight_entries", ["day"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_weight_entries_day", table_name="weight_entries")
    op.drop_index("ix_weight_entries_id", table_name="weight_entries")
    op.drop_table("weight_entries")

    op.drop_index("ix_check_ins_day", table_name="check_ins")
    op.drop_index("ix_check_ins_habit_id", table_name="check_ins")
    op.drop_index("ix_check_ins_id", table_name="check_ins")
    op.drop_table("check_ins")

    op.drop_index("ix_habits_created_at", table_name="habits")
    op.drop_index("ix_habits_id", table_name="habits")
    op.drop_table("habits")
