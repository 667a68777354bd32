"""initial schema

Revision ID: 0001a1b2c3d4
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001a1b2c3d4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _product_kind() -> sa.Enum:
    return sa.Enum("mp", "transformado", name="product_kind", native_enum=False)


def upgrade() -> None:
    op.create_table(
        "restaurant",
        sa.Column("id", sa.Integer(), nullable=False, primary_key=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("pin", sa.String(), nullable=False),
        sa.Column("label", sa.String(), nullable=True),
        sa.Column("alert_days_before_expiry", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("warning_days_before_expiry", sa.Integer(), nullable=True),
        sa.Column("timezone", sa.String(), nullable=False, server_default="Europe/Lisbon"),
        sa.Column("locale", sa.String(), nullable=False, server_default="pt-PT"),
        *_timestamps(),
        sa.UniqueConstraint("pin", name="uq_restaurant_pin"),
        sa.UniqueConstraint("label", name="uq_restaurant_label"),
    )
    op.create_index(op.f("ix_restaurant_name"), "restaurant", ["name"], unique=False)

    op.create_table(
        "auth_session",
        sa.Column("id", sa.Integer(), nullable=False, primary_key=True),
        sa.Column("token", sa.String(), nullable=False),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurant.id"]),
        sa.UniqueConstraint("token", name="uq_auth_session_token"),
    )
    op.create_index(op.f("ix_auth_session_restaurant_id"), "auth_session", ["restaurant_id"], unique=False)
    op.create_index(op.f("ix_auth_session_expires_at"), "auth_session", ["expires_at"], unique=False)

    op.create_table(
        "login_attempt",
        sa.Column("id", sa.Integer(), nullable=False, primary_key=True),
        sa.Column("client_key", sa.String(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f("ix_login_attempt_client_key"), "login_attempt", ["client_key"], unique=False)

    op.create_table(
        "account",
        sa.Column("id", sa.Integer(), nullable=False, primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurant.id"]),
    )
    op.create_index(op.f("ix_account_restaurant_id"), "account", ["restaurant_id"], unique=False)

    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), nullable=False, primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("tipo", _product_kind(), nullable=False),
        sa.Column("alert_days_before_expiry", sa.Integer(), nullable=True),
        sa.Column("warning_days_before_expiry", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurant.id"]),
        sa.UniqueConstraint("restaurant_id", "name", "tipo", name="uq_category_restaurant_name_tipo"),
    )
    op.create_index(op.f("ix_category_restaurant_id"), "category", ["restaurant_id"], unique=False)

    op.create_table(
        "location",
        sa.Column("id", sa.Integer(), nullable=False, primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurant.id"]),
        sa.UniqueConstraint("restaurant_id", "name", name="uq_location_restaurant_name"),
    )
    op.create_index(op.f("ix_location_restaurant_id"), "location", ["restaurant_id"], unique=False)

    op.create_table(
        "product_batch",
        sa.Column("id", sa.Integer(), nullable=False, primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(), nullable=False, server_default="un"),
        sa.Column("expiry_date", sa.Date(), nullable=False),
        sa.Column("tipo", _product_kind(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("location_id", sa.Integer(), nullable=True),
        sa.Column("packaging_type", sa.String(), nullable=True),
        sa.Column("size", sa.Float(), nullable=True),
        sa.Column("size_unit", sa.String(), nullable=True),
        sa.Column("status", sa.Enum("ACTIVE", "USED", name="batch_status", native_enum=False), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurant.id"]),
        sa.ForeignKeyConstraint(["account_id"], ["account.id"]),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["location_id"], ["location.id"], ondelete="SET NULL"),
        sa.CheckConstraint("quantity >= 0", name="ck_product_batch_quantity_non_negative"),
    )
    op.create_index(op.f("ix_product_batch_restaurant_id"), "product_batch", ["restaurant_id"], unique=False)
    op.create_index(op.f("ix_product_batch_expiry_date"), "product_batch", ["expiry_date"], unique=False)
    op.create_index(op.f("ix_product_batch_category_id"), "product_batch", ["category_id"], unique=False)
    op.create_index(op.f("ix_product_batch_location_id"), "product_batch", ["location_id"], unique=False)
    op.create_index(op.f("ix_product_batch_status"), "product_batch", ["status"], unique=False)

    op.create_table(
        "stock_event",
        sa.Column("id", sa.Integer(), nullable=False, primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.Enum("ENTRY", "WASTE", name="stock_event_type", native_enum=False), nullable=False),
        sa.Column("product_name", sa.String(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurant.id"]),
    )
    op.create_index(op.f("ix_stock_event_restaurant_id"), "stock_event", ["restaurant_id"], unique=False)
    op.create_index(op.f("ix_stock_event_type"), "stock_event", ["type"], unique=False)
    # Índice composto para o histórico (restaurante + período)
    op.create_index(
        "ix_stock_event_restaurant_created_at",
        "stock_event",
        ["restaurant_id", "created_at"],
        unique=False,
    )

    op.create_table(
        "support_message",
        sa.Column("id", sa.Integer(), nullable=False, primary_key=True),
        sa.Column("restaurant_id", sa.Integer(), nullable=False),
        sa.Column("restaurant_name", sa.String(), nullable=True),
        sa.Column(
            "type",
            sa.Enum("bug", "suggestion", "question", "other", name="support_type", native_enum=False),
            nullable=False,
        ),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("contact", sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurant.id"]),
    )
    op.create_index(op.f("ix_support_message_restaurant_id"), "support_message", ["restaurant_id"], unique=False)


def downgrade() -> None:
    op.drop_table("support_message")
    op.drop_index("ix_stock_event_restaurant_created_at", table_name="stock_event")
    op.drop_table("stock_event")
    op.drop_table("product_batch")
    op.drop_table("location")
    op.drop_table("category")
    op.drop_table("account")
    op.drop_table("login_attempt")
    op.drop_table("auth_session")
    op.drop_table("restaurant")
