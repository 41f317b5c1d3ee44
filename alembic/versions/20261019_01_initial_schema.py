"""initial call counter schema

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def _table_exists(table_name: str) -> bool:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    return table_name in set(inspector.get_table_names())


def _index_exists(table_name: str, index_name: str) -> bool:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    if table_name not in set(inspector.get_table_names()):
        return False
    return index_name in {idx["name"] for idx in inspector.get_indexes(table_name)}


def _create_index(name: str, table: str, columns: list[str], unique: bool = False) -> None:
    if not _index_exists(table, name):
        op.create_index(name, table, columns, unique=unique)


def upgrade() -> None:
    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("username", sa.String(length=128), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("full_name", sa.String(length=255), nullable=True),
            sa.Column("mda_code", sa.String(length=16), nullable=True),
            sa.Column("password_hash", sa.String(length=255), nullable=False),
            sa.Column("role", sa.String(length=64), nullable=False, server_default="USER"),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("email", name="uq_users_email"),
        )
    _create_index("ix_users_id", "users", ["id"])
    _create_index("ix_users_username", "users", ["username"], unique=True)
    _create_index("ix_users_mda_code", "users", ["mda_code"], unique=True)

    for table in ("alert_codes", "medical_codes"):
        if not _table_exists(table):
            op.create_table(
                table,
                sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
                sa.Column("code", sa.String(length=64), nullable=False),
                sa.Column("created_at", sa.DateTime(), nullable=False),
                sa.PrimaryKeyConstraint("id"),
            )
        _create_index(f"ix_{table}_code", table, ["code"], unique=True)

    if not _table_exists("calls"):
        op.create_table(
            "calls",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("call_type", sa.String(length=32), nullable=False),
            sa.Column("call_date", sa.Date(), nullable=False),
            sa.Column("start_time", sa.Time(), nullable=False),
            sa.Column("end_time", sa.Time(), nullable=True),
            sa.Column("duration_minutes", sa.Integer(), nullable=True),
            sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
            sa.Column("location", sa.String(length=512), nullable=False),
            sa.Column("city", sa.String(length=128), nullable=True),
            sa.Column("street", sa.String(length=256), nullable=True),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("vehicle_number", sa.String(length=16), nullable=True),
            sa.Column("vehicle_type", sa.String(length=32), nullable=False, server_default="ambulance"),
            sa.Column("alert_code_id", sa.Integer(), nullable=True),
            sa.Column("medical_code_id", sa.Integer(), nullable=True),
            sa.Column("entry_code", sa.String(length=64), nullable=True),
            sa.Column("meter_visa_number", sa.String(length=64), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["alert_code_id"], ["alert_codes.id"], ondelete="SET NULL"),
            sa.ForeignKeyConstraint(["medical_code_id"], ["medical_codes.id"], ondelete="SET NULL"),
        )
    _create_index("ix_calls_user_id", "calls", ["user_id"])
    _create_index("ix_calls_call_date", "calls", ["call_date"])
    _create_index("ix_calls_status", "calls", ["status"])
    _create_index("ix_calls_vehicle_number", "calls", ["vehicle_number"])
    _create_index("ix_calls_created_at", "calls", ["created_at"])

    if not _table_exists("entry_codes"):
        op.create_table(
            "entry_codes",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("entry_code", sa.String(length=64), nullable=False),
            sa.Column("city", sa.String(length=128), nullable=False),
            sa.Column("street", sa.String(length=256), nullable=False),
            sa.Column("location_details", sa.String(length=512), nullable=True),
            sa.Column("notes", sa.String(length=1024), nullable=True),
            sa.Column("created_by", sa.String(length=36), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
            sa.UniqueConstraint("entry_code", "city", "street", name="uq_entry_codes_code_city_street"),
        )
    _create_index("ix_entry_codes_city", "entry_codes", ["city"])

    if not _table_exists("vehicles"):
        op.create_table(
            "vehicles",
            sa.Column("vehicle_number", sa.String(length=16), nullable=False),
            sa.Column("vehicle_type", sa.String(length=32), nullable=False, server_default="ambulance"),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("vehicle_number"),
        )

    if not _table_exists("user_vehicle_settings"):
        op.create_table(
            "user_vehicle_settings",
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("vehicle_number", sa.String(length=16), nullable=False),
            sa.Column("vehicle_type", sa.String(length=32), nullable=False, server_default="ambulance"),
            sa.Column("selected_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("user_id"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        )
    _create_index(
        "ix_user_vehicle_settings_vehicle_number", "user_vehicle_settings", ["vehicle_number"], unique=True
    )

    if not _table_exists("user_settings"):
        op.create_table(
            "user_settings",
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("entry_code", sa.String(length=64), nullable=True),
            sa.Column("meter_number", sa.String(length=64), nullable=True),
            sa.Column("visa_number", sa.String(length=64), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("user_id"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        )

    if not _table_exists("api_keys"):
        op.create_table(
            "api_keys",
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("key_name", sa.String(length=128), nullable=False),
            sa.Column("key_hash", sa.String(length=64), nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("permissions", sa.JSON(), nullable=True),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
            sa.Column("last_used_at", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        )
    _create_index("ix_api_keys_key_hash", "api_keys", ["key_hash"], unique=True)
    _create_index("ix_api_keys_user_id", "api_keys", ["user_id"])

    if not _table_exists("user_sessions"):
        op.create_table(
            "user_sessions",
            sa.Column("id", sa.String(length=32), nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("expires_at", sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        )
    _create_index("ix_user_sessions_user_id", "user_sessions", ["user_id"])
    _create_index("ix_user_sessions_expires_at", "user_sessions", ["expires_at"])


def downgrade() -> None:
    for table in (
        "user_sessions",
        "api_keys",
        "user_settings",
        "user_vehicle_settings",
        "vehicles",
        "entry_codes",
        "calls",
        "medical_codes",
        "alert_codes",
        "users",
    ):
        if _table_exists(table):
            op.drop_table(table)
