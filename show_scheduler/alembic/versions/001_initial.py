"""initial

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.BigInteger(), sa.Identity(), nullable=False)


def _uid() -> sa.Column:
    return sa.Column("uid", sa.String(64), nullable=False)


def _metadata() -> sa.Column:
    return sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True)


def _deleted_at() -> sa.Column:
    return sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        _uid(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        _metadata(),
        _created_at(),
        _updated_at(),
        _deleted_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    op.create_table(
        "clients",
        _id(),
        _uid(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("contact_person", sa.String(255), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        _metadata(),
        _created_at(),
        _updated_at(),
        _deleted_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    op.create_table(
        "studios",
        _id(),
        _uid(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(512), nullable=True),
        _metadata(),
        _created_at(),
        _updated_at(),
        _deleted_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    op.create_table(
        "studio_rooms",
        _id(),
        _uid(),
        sa.Column("studio_id", sa.BigInteger(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=True),
        _metadata(),
        _created_at(),
        _updated_at(),
        _deleted_at(),
        sa.ForeignKeyConstraint(["studio_id"], ["studios.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    for table in ("show_types", "show_statuses", "show_standards"):
        op.create_table(
            table,
            _id(),
            _uid(),
            sa.Column("name", sa.String(255), nullable=False),
            _metadata(),
            _created_at(),
            _deleted_at(),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("uid"),
        )
    op.create_table(
        "mcs",
        _id(),
        _uid(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("alias_name", sa.String(255), nullable=True),
        sa.Column("user_id", sa.BigInteger(), nullable=True),
        _metadata(),
        _created_at(),
        _deleted_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    op.create_table(
        "platforms",
        _id(),
        _uid(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("api_config", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        _metadata(),
        _created_at(),
        _deleted_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    op.create_table(
        "studio_memberships",
        _id(),
        _uid(),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("group_type", sa.String(32), nullable=False),
        sa.Column("group_id", sa.BigInteger(), nullable=False),
        sa.Column("role", sa.String(32), server_default="member", nullable=False),
        _metadata(),
        _created_at(),
        _deleted_at(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
        sa.UniqueConstraint("user_id", "group_type", "group_id", name="ux_membership_user_group"),
    )
    op.create_table(
        "schedules",
        _id(),
        _uid(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(32), server_default="draft", nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("plan_document", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        _metadata(),
        sa.Column("client_id", sa.BigInteger(), nullable=True),
        sa.Column("created_by", sa.BigInteger(), nullable=True),
        sa.Column("published_by", sa.BigInteger(), nullable=True),
        _created_at(),
        _updated_at(),
        _deleted_at(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["published_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    op.create_index("ix_schedules_client_start", "schedules", ["client_id", "start_date"])
    op.create_index("ix_schedules_status", "schedules", ["status"])
    op.create_table(
        "schedule_snapshots",
        _id(),
        _uid(),
        sa.Column("schedule_id", sa.BigInteger(), nullable=False),
        sa.Column("plan_document", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("snapshot_reason", sa.String(255), nullable=False),
        sa.Column("created_by", sa.BigInteger(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(["schedule_id"], ["schedules.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    op.create_index("ix_schedule_snapshots_schedule_id", "schedule_snapshots", ["schedule_id"])
    op.create_table(
        "shows",
        _id(),
        _uid(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        _metadata(),
        sa.Column("client_id", sa.BigInteger(), nullable=False),
        sa.Column("studio_room_id", sa.BigInteger(), nullable=True),
        sa.Column("show_type_id", sa.BigInteger(), nullable=False),
        sa.Column("show_status_id", sa.BigInteger(), nullable=False),
        sa.Column("show_standard_id", sa.BigInteger(), nullable=False),
        sa.Column("schedule_id", sa.BigInteger(), nullable=True),
        _created_at(),
        _updated_at(),
        _deleted_at(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"]),
        sa.ForeignKeyConstraint(["studio_room_id"], ["studio_rooms.id"]),
        sa.ForeignKeyConstraint(["show_type_id"], ["show_types.id"]),
        sa.ForeignKeyConstraint(["show_status_id"], ["show_statuses.id"]),
        sa.ForeignKeyConstraint(["show_standard_id"], ["show_standards.id"]),
        sa.ForeignKeyConstraint(["schedule_id"], ["schedules.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    op.create_index("ix_shows_start_time", "shows", ["start_time"])
    op.create_index("ix_shows_end_time", "shows", ["end_time"])
    op.create_index("ix_shows_studio_room_id", "shows", ["studio_room_id"])
    op.create_index("ix_shows_schedule_id", "shows", ["schedule_id"])
    op.create_table(
        "show_mcs",
        _id(),
        _uid(),
        sa.Column("show_id", sa.BigInteger(), nullable=False),
        sa.Column("mc_id", sa.BigInteger(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        _metadata(),
        _created_at(),
        _deleted_at(),
        sa.ForeignKeyConstraint(["show_id"], ["shows.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["mc_id"], ["mcs.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    op.create_index("ix_show_mcs_show_id", "show_mcs", ["show_id"])
    op.create_index("ix_show_mcs_mc_id", "show_mcs", ["mc_id"])
    op.create_table(
        "show_platforms",
        _id(),
        _uid(),
        sa.Column("show_id", sa.BigInteger(), nullable=False),
        sa.Column("platform_id", sa.BigInteger(), nullable=False),
        sa.Column("live_stream_link", sa.String(1024), nullable=True),
        sa.Column("platform_show_id", sa.String(255), nullable=True),
        sa.Column("viewer_count", sa.Integer(), server_default="0", nullable=False),
        _metadata(),
        _created_at(),
        _deleted_at(),
        sa.ForeignKeyConstraint(["show_id"], ["shows.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["platform_id"], ["platforms.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uid"),
    )
    op.create_index("ix_show_platforms_show_id", "show_platforms", ["show_id"])


def downgrade() -> None:
    op.drop_index("ix_show_platforms_show_id", table_name="show_platforms")
    op.drop_table("show_platforms")
    op.drop_index("ix_show_mcs_mc_id", table_name="show_mcs")
    op.drop_index("ix_show_mcs_show_id", table_name="show_mcs")
    op.drop_table("show_mcs")
    op.drop_index("ix_shows_schedule_id", table_name="shows")
    op.drop_index("ix_shows_studio_room_id", table_name="shows")
    op.drop_index("ix_shows_end_time", table_name="shows")
    op.drop_index("ix_shows_start_time", table_name="shows")
    op.drop_table("shows")
    op.drop_index("ix_schedule_snapshots_schedule_id", table_name="schedule_snapshots")
    op.drop_table("schedule_snapshots")
    op.drop_index("ix_schedules_status", table_name="schedules")
    op.drop_index("ix_schedules_client_start", table_name="schedules")
    op.drop_table("schedules")
    op.drop_table("studio_memberships")
    op.drop_table("platforms")
    op.drop_table("mcs")
    op.drop_table("show_standards")
    op.drop_table("show_statuses")
    op.drop_table("show_types")
    op.drop_table("studio_rooms")
    op.drop_table("studios")
    op.drop_table("clients")
    op.drop_table("users")
