"""Expense transformer."""

from typing import Any, Dict

from invoicer.models.entity import EntityType
from invoicer.models.expense import Expense
from invoicer.transformers.base import (
    EntityTransformer,
    ItemResource,
    to_date_string,
    to_float,
)


class ExpenseTransformer(EntityTransformer):
    ENTITY_TYPE = EntityType.EXPENSE
    AVAILABLE_INCLUDES = frozenset({"client", "vendor", "invoice"})

    def include_client(self, expense: Expense) -> ItemResource:
        return self.include_item(expense.client, EntityType.CLIENT)

    def include_vendor(self, expense: Expense) -> ItemResource:
        return self.include_item(expense.vendor, EntityType.VENDOR)

    def include_invoice(self, expense: Expense) -> ItemResource:
        return self.include_item(expense.invoice, EntityType.INVOICE)

    def transform(self, expense: Expense) -> Dict[str, Any]:
        # Related records are referenced by internal key; their public ids
        # are available through the includes.
        return {
            "id": expense.public_id,
            "amount": to_float(expense.amount),
            "expense_date": to_date_string(expense.expense_date),
            "currency_code": expense.currency_code or self.account.currency_code,
            "exchange_rate": to_float(expense.exchange_rate),
            "should_be_invoiced": bool(expense.should_be_invoiced),
            "public_notes": expense.public_notes,
            "private_notes": expense.private_notes,
            "vendor_id": expense.vendor_id,
            "client_id": expense.client_id,
            "invoice_id": expense.invoice_id,
            "user_id": expense.user_id,
            **self.get_defaults(expense),
        }
