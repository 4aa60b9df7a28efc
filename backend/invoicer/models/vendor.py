"""
Invoicer Backend — Vendor and Vendor Contact Models
=====================================================

What:  Suppliers an account records expenses against, and their contacts.
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from invoicer.database import Base
from invoicer.models.entity import EntityType, OwnedEntityMixin

if TYPE_CHECKING:
    from invoicer.models.expense import Expense


class Vendor(OwnedEntityMixin, Base):
    __tablename__ = "vendors"
    __table_args__ = (
        UniqueConstraint("account_id", "public_id", name="uq_vendors_account_public_id"),
    )

    entity_type = EntityType.VENDOR

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    address1: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    city: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    work_phone: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    website: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    vat_number: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    private_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    vendor_contacts: Mapped[List["VendorContact"]] = relationship(
        back_populates="vendor", lazy="raise", order_by="VendorContact.id"
    )
    expenses: Mapped[List["Expense"]] = relationship(
        back_populates="vendor", lazy="raise", order_by="Expense.id"
    )

    def __repr__(self) -> str:
        return f"<Vendor(id={self.id}, public_id={self.public_id}, name='{self.name}')>"


class VendorContact(OwnedEntityMixin, Base):
    __tablename__ = "vendor_contacts"

    entity_type = EntityType.VENDOR_CONTACT

    vendor_id: Mapped[int] = mapped_column(
        ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    vendor: Mapped[Vendor] = relationship(back_populates="vendor_contacts", lazy="raise")
