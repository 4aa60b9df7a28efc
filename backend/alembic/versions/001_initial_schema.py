"""Initial schema

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the account, user, API token, client, contact, vendor,
       vendor contact, invoice, invoice item and expense tables.
How:   Every account-owned table gets the shared entity columns
       (account_id, public_id, timestamps, soft delete) from _entity_columns();
       owned tables add user_id.

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import List, Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> List[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _entity_columns(owned: bool = True) -> List[sa.Column]:
    columns = [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "account_id",
            sa.Integer(),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "public_id",
            sa.Integer(),
            nullable=False,
            comment="Per-account identifier exposed as `id` in API responses",
        ),
        *_timestamps(),
        sa.Column(
            "deleted_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            comment="Set when the record is archived",
        ),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
    ]
    if owned:
        columns.append(
            sa.Column(
                "user_id",
                sa.Integer(),
                sa.ForeignKey("users.id", ondelete="CASCADE"),
                nullable=False,
            )
        )
    return columns


def _entity_indexes(table: str, owned: bool = True) -> None:
    op.create_index(f"ix_{table}_account_id", table, ["account_id"])
    op.create_index(f"ix_{table}_updated_at", table, ["updated_at"])
    if owned:
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])


def _money(name: str, scale: int = 2) -> sa.Column:
    return sa.Column(name, sa.Numeric(13, scale), nullable=False, server_default=sa.text("0"))


def _string(name: str, length: int = 255) -> sa.Column:
    return sa.Column(name, sa.String(length), nullable=False, server_default=sa.text("''"))


def _text(name: str) -> sa.Column:
    return sa.Column(name, sa.Text(), nullable=False, server_default=sa.text("''"))


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "account_key",
            sa.String(64),
            nullable=False,
            comment="Public account identifier echoed in every transformed record",
        ),
        _string("name"),
        sa.Column("currency_code", sa.String(3), nullable=False, server_default=sa.text("'USD'")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("account_key"),
    )

    op.create_table(
        "users",
        *_entity_columns(owned=False),
        _string("first_name", 100),
        _string("last_name", 100),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), server_default=sa.false(), nullable=False),
        _text("permissions"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("account_id", "public_id", name="uq_users_account_public_id"),
    )
    _entity_indexes("users", owned=False)

    op.create_table(
        "api_tokens",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        _string("name"),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_api_tokens_token", "api_tokens", ["token"], unique=True)

    op.create_table(
        "clients",
        *_entity_columns(),
        _string("name"),
        _string("address1"),
        _string("address2"),
        _string("city"),
        _string("state"),
        _string("postal_code"),
        _string("work_phone"),
        _string("website"),
        _text("private_notes"),
        _string("currency_code", 3),
        _money("balance"),
        _money("paid_to_date"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("account_id", "public_id", name="uq_clients_account_public_id"),
    )
    _entity_indexes("clients")

    op.create_table(
        "contacts",
        *_entity_columns(),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        _string("first_name"),
        _string("last_name"),
        _string("email"),
        _string("phone"),
        sa.Column("is_primary", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    _entity_indexes("contacts")
    op.create_index("ix_contacts_client_id", "contacts", ["client_id"])

    op.create_table(
        "vendors",
        *_entity_columns(),
        _string("name"),
        _string("address1"),
        _string("city"),
        _string("work_phone"),
        _string("website"),
        _string("vat_number"),
        _text("private_notes"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("account_id", "public_id", name="uq_vendors_account_public_id"),
    )
    _entity_indexes("vendors")

    op.create_table(
        "vendor_contacts",
        *_entity_columns(),
        sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False),
        _string("first_name"),
        _string("last_name"),
        _string("email"),
        _string("phone"),
        sa.Column("is_primary", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    _entity_indexes("vendor_contacts")
    op.create_index("ix_vendor_contacts_vendor_id", "vendor_contacts", ["vendor_id"])

    op.create_table(
        "invoices",
        *_entity_columns(),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("invoice_number", sa.String(255), nullable=False),
        sa.Column("invoice_status_id", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("invoice_date", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        _string("po_number"),
        _money("discount"),
        _money("amount"),
        _money("balance"),
        _text("public_notes"),
        _text("terms"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("account_id", "public_id", name="uq_invoices_account_public_id"),
    )
    _entity_indexes("invoices")
    op.create_index("ix_invoices_client_id", "invoices", ["client_id"])

    op.create_table(
        "invoice_items",
        *_entity_columns(),
        sa.Column("invoice_id", sa.Integer(), sa.ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        _string("product_key"),
        _text("notes"),
        _money("cost"),
        _money("qty"),
        sa.PrimaryKeyConstraint("id"),
    )
    _entity_indexes("invoice_items")
    op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"])

    op.create_table(
        "expenses",
        *_entity_columns(),
        sa.Column("vendor_id", sa.Integer(), sa.ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id", ondelete="SET NULL"), nullable=True),
        sa.Column("invoice_id", sa.Integer(), sa.ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True),
        _money("amount"),
        sa.Column("expense_date", sa.Date(), nullable=True),
        _string("currency_code", 3),
        sa.Column("exchange_rate", sa.Numeric(13, 4), nullable=False, server_default=sa.text("1")),
        sa.Column("should_be_invoiced", sa.Boolean(), server_default=sa.false(), nullable=False),
        _text("public_notes"),
        _text("private_notes"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("account_id", "public_id", name="uq_expenses_account_public_id"),
    )
    _entity_indexes("expenses")
    op.create_index("ix_expenses_vendor_id", "expenses", ["vendor_id"])
    op.create_index("ix_expenses_client_id", "expenses", ["client_id"])


def downgrade() -> None:
    """Drop every table, children first. Destructive."""
    for table in (
        "expenses",
        "invoice_items",
        "invoices",
        "vendor_contacts",
        "vendors",
        "contacts",
        "clients",
        "api_tokens",
        "users",
        "accounts",
    ):
        op.drop_table(table)
