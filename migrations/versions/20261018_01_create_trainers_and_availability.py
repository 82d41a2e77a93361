"""create trainers and weekly availability template

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18 10:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261018_01"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "trainers",
        sa.Column("id", sa.Integer(), sa.Identity(), primary_key=True, nullable=False),
        sa.Column("display_name", sa.String(length=120), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_trainers_id", "trainers", ["id"], unique=False)

    op.create_table(
        "trainer_availability",
        sa.Column("id", sa.Integer(), sa.Identity(), primary_key=True, nullable=False),
        sa.Column("trainer_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["trainer_id"], ["trainers.id"], ondelete="CASCADE"),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_trainer_availability_day_of_week"),
    )
    op.create_index("ix_trainer_availability_id", "trainer_availability", ["id"], unique=False)
    op.create_index("ix_trainer_availability_trainer_id", "trainer_availability", ["trainer_id"], unique=False)
    op.create_index("ix_trainer_availability_day_of_week", "trainer_availability", ["day_of_week"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_trainer_availability_day_of_week", table_name="trainer_availability")
    op.drop_index("ix_trainer_availability_trainer_id", table_name="trainer_availability")
    op.drop_index("ix_trainer_availability_id", table_name="trainer_availability")
    op.drop_table("trainer_availability")
    op.drop_index("ix_trainers_id", table_name="trainers")
    op.drop_table("trainers")
