"""create session requests and training sessions

Revision ID: 20261018_02
Revises: 20261018_01
Create Date: 2026-10-18 10:05:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261018_02"
down_revision: Union[str, None] = "20261018_01"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "session_requests",
        sa.Column("id", sa.Integer(), sa.Identity(), primary_key=True, nullable=False),
        sa.Column("trainer_id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("client_name", sa.String(length=120), nullable=False),
        sa.Column("session_type", sa.String(length=20), nullable=False, server_default="personal"),
        sa.Column("category", sa.String(length=60), nullable=False, server_default="Training"),
        sa.Column("requested_date", sa.Date(), nullable=False),
        sa.Column("requested_start", sa.String(length=5), nullable=False),
        sa.Column("requested_end", sa.String(length=5), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("message", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["trainer_id"], ["trainers.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_session_requests_id", "session_requests", ["id"], unique=False)
    op.create_index("ix_session_requests_trainer_id", "session_requests", ["trainer_id"], unique=False)
    op.create_index("ix_session_requests_client_id", "session_requests", ["client_id"], unique=False)
    op.create_index("ix_session_requests_requested_date", "session_requests", ["requested_date"], unique=False)

    op.create_table(
        "training_sessions",
        sa.Column("id", sa.Integer(), sa.Identity(), primary_key=True, nullable=False),
        sa.Column("trainer_id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("client_name", sa.String(length=120), nullable=False),
        sa.Column("session_type", sa.String(length=20), nullable=False, server_default="personal"),
        sa.Column("category", sa.String(length=60), nullable=False, server_default="Training"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="confirmed"),
        sa.Column("location", sa.String(length=120), nullable=False, server_default="TBD"),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("request_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["trainer_id"], ["trainers.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["request_id"], ["session_requests.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("request_id", name="uq_training_sessions_request_id"),
    )
    op.create_index("ix_training_sessions_id", "training_sessions", ["id"], unique=False)
    op.create_index("ix_training_sessions_trainer_id", "training_sessions", ["trainer_id"], unique=False)
    op.create_index("ix_training_sessions_client_id", "training_sessions", ["client_id"], unique=False)
    op.create_index("ix_training_sessions_date", "training_sessions", ["date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_training_sessions_date", table_name="training_sessions")
    op.drop_index("ix_training_sessions_client_id", table_name="training_sessions")
    op.drop_index("ix_training_sessions_trainer_id", table_name="training_sessions")
    op.drop_index("ix_training_sessions_id", table_name="training_sessions")
    op.drop_table("training_sessions")
    op.drop_index("ix_session_requests_requested_date", table_name="session_requests")
    op.drop_index("ix_session_requests_client_id", table_name="session_requests")
    op.drop_index("ix_session_requests_trainer_id", table_name="session_requests")
    op.drop_index("ix_session_requests_id", table_name="session_requests")
    op.drop_table("session_requests")
