"""
Invoicer Backend — Shared Entity Columns
==========================================

What:  The entity type enumeration and the column mixins every account-owned
       table shares (public id, account, owner, timestamps, soft delete).
Why:   API filters rely on these columns being present and named the same
       on every entity: visibility checks `user_id` (or `id` for users),
       the updated-since filter checks `updated_at`, lookups use `public_id`.

Identifiers:
    id:        Internal primary key, never exposed by the API
    public_id: Sequential per account; the API's `id` field
"""

import enum
from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, false, text
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntityType(str, enum.Enum):
    """Entity type tags; the value is the JSON:API `type` of the entity."""

    ACCOUNT = "account"
    USER = "user"
    CLIENT = "client"
    CONTACT = "contact"
    VENDOR = "vendor"
    VENDOR_CONTACT = "vendor_contact"
    INVOICE = "invoice"
    INVOICE_ITEM = "invoice_item"
    EXPENSE = "expense"


class AccountEntityMixin:
    """Columns for rows that belong to an account and are addressed by public id."""

    entity_type: ClassVar[EntityType]

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    public_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Per-account identifier exposed as `id` in API responses",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        index=True,
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="Set when the record is archived",
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )


class OwnedEntityMixin(AccountEntityMixin):
    """Adds the owning user; restricted API visibility matches on this column."""

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
