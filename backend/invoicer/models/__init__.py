"""
Invoicer Backend — ORM Models
===============================

Importing this package registers every model with Base.metadata, which
resolves the string-based relationship targets between modules and lets
Alembic and the test suite see the full schema.
"""

from invoicer.models.entity import EntityType
from invoicer.models.account import Account, ApiToken, User
from invoicer.models.client import Client, Contact
from invoicer.models.vendor import Vendor, VendorContact
from invoicer.models.invoice import Invoice, InvoiceItem
from invoicer.models.expense import Expense

# Entity type → ORM model, used by routes and the include eager-loader
MODELS = {
    EntityType.USER: User,
    EntityType.CLIENT: Client,
    EntityType.CONTACT: Contact,
    EntityType.VENDOR: Vendor,
    EntityType.VENDOR_CONTACT: VendorContact,
    EntityType.INVOICE: Invoice,
    EntityType.INVOICE_ITEM: InvoiceItem,
    EntityType.EXPENSE: Expense,
}

__all__ = [
    "Account",
    "ApiToken",
    "Client",
    "Contact",
    "EntityType",
    "Expense",
    "Invoice",
    "InvoiceItem",
    "MODELS",
    "User",
    "Vendor",
    "VendorContact",
]
