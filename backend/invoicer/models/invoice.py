"""
Invoicer Backend — Invoice and Invoice Item Models
====================================================

What:  Invoices issued to clients and their line items.

Amounts are stored as entered; totals and balances are maintained by the
invoicing workflows that write these rows, not computed here.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from invoicer.database import Base
from invoicer.models.client import Client
from invoicer.models.entity import EntityType, OwnedEntityMixin

INVOICE_STATUS_DRAFT = 1
INVOICE_STATUS_SENT = 2
INVOICE_STATUS_VIEWED = 3
INVOICE_STATUS_PARTIAL = 5
INVOICE_STATUS_PAID = 6


class Invoice(OwnedEntityMixin, Base):
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("account_id", "public_id", name="uq_invoices_account_public_id"),
    )

    entity_type = EntityType.INVOICE

    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    invoice_number: Mapped[str] = mapped_column(String(255), nullable=False)
    invoice_status_id: Mapped[int] = mapped_column(
        Integer, nullable=False, default=INVOICE_STATUS_DRAFT
    )
    invoice_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    po_number: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    discount: Mapped[Decimal] = mapped_column(Numeric(13, 2), nullable=False, default=Decimal("0"))
    amount: Mapped[Decimal] = mapped_column(Numeric(13, 2), nullable=False, default=Decimal("0"))
    balance: Mapped[Decimal] = mapped_column(Numeric(13, 2), nullable=False, default=Decimal("0"))
    public_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    terms: Mapped[str] = mapped_column(Text, nullable=False, default="")

    client: Mapped[Client] = relationship(back_populates="invoices", lazy="raise")
    invoice_items: Mapped[List["InvoiceItem"]] = relationship(
        back_populates="invoice", lazy="raise", order_by="InvoiceItem.id"
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, invoice_number='{self.invoice_number}')>"


class InvoiceItem(OwnedEntityMixin, Base):
    __tablename__ = "invoice_items"

    entity_type = EntityType.INVOICE_ITEM

    invoice_id: Mapped[int] = mapped_column(
        ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_key: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    cost: Mapped[Decimal] = mapped_column(Numeric(13, 2), nullable=False, default=Decimal("0"))
    qty: Mapped[Decimal] = mapped_column(Numeric(13, 2), nullable=False, default=Decimal("0"))

    invoice: Mapped[Invoice] = relationship(back_populates="invoice_items", lazy="raise")
