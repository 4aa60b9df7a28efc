"""
Invoicer Backend — Expense Model
==================================

What:  Money spent with a vendor, optionally billable to a client.

Currency fields:
    currency_code:  Currency the expense was paid in (empty = account currency)
    exchange_rate:  Rate into the account currency, as entered by the user
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from invoicer.database import Base
from invoicer.models.client import Client
from invoicer.models.entity import EntityType, OwnedEntityMixin
from invoicer.models.invoice import Invoice
from invoicer.models.vendor import Vendor


class Expense(OwnedEntityMixin, Base):
    __tablename__ = "expenses"
    __table_args__ = (
        UniqueConstraint("account_id", "public_id", name="uq_expenses_account_public_id"),
    )

    entity_type = EntityType.EXPENSE

    vendor_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True, index=True
    )
    client_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"), nullable=True, index=True
    )
    invoice_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(13, 2), nullable=False, default=Decimal("0"))
    expense_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    currency_code: Mapped[str] = mapped_column(String(3), nullable=False, default="")
    exchange_rate: Mapped[Decimal] = mapped_column(
        Numeric(13, 4), nullable=False, default=Decimal("1")
    )
    should_be_invoiced: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    public_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    private_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    vendor: Mapped[Optional[Vendor]] = relationship(back_populates="expenses", lazy="raise")
    client: Mapped[Optional[Client]] = relationship(back_populates="expenses", lazy="raise")
    invoice: Mapped[Optional[Invoice]] = relationship(lazy="raise")

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, public_id={self.public_id}, amount={self.amount})>"
