"""
Invoicer Backend — Client and Contact Models
==============================================

What:  Customers of an account (Client) and the people reached at them
       (Contact). Invoices and expenses point at clients.

Relationships use lazy="raise": async sessions cannot lazy-load, so every
relation a transformer touches must be eager-loaded by the query filters.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from invoicer.database import Base
from invoicer.models.entity import EntityType, OwnedEntityMixin

if TYPE_CHECKING:
    from invoicer.models.expense import Expense
    from invoicer.models.invoice import Invoice


class Client(OwnedEntityMixin, Base):
    __tablename__ = "clients"
    __table_args__ = (
        UniqueConstraint("account_id", "public_id", name="uq_clients_account_public_id"),
    )

    entity_type = EntityType.CLIENT

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    address1: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    address2: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    city: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    state: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    postal_code: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    work_phone: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    website: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    private_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    currency_code: Mapped[str] = mapped_column(String(3), nullable=False, default="")
    balance: Mapped[Decimal] = mapped_column(Numeric(13, 2), nullable=False, default=Decimal("0"))
    paid_to_date: Mapped[Decimal] = mapped_column(
        Numeric(13, 2), nullable=False, default=Decimal("0")
    )

    contacts: Mapped[List["Contact"]] = relationship(
        back_populates="client", lazy="raise", order_by="Contact.id"
    )
    invoices: Mapped[List["Invoice"]] = relationship(
        back_populates="client", lazy="raise", order_by="Invoice.id"
    )
    expenses: Mapped[List["Expense"]] = relationship(
        back_populates="client", lazy="raise", order_by="Expense.id"
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, public_id={self.public_id}, name='{self.name}')>"


class Contact(OwnedEntityMixin, Base):
    __tablename__ = "contacts"

    entity_type = EntityType.CONTACT

    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    client: Mapped[Client] = relationship(back_populates="contacts", lazy="raise")

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, client_id={self.client_id}, email='{self.email}')>"
