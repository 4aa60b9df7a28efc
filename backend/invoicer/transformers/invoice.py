"""Invoice and invoice item transformers."""

from typing import Any, Dict

from invoicer.models.entity import EntityType
from invoicer.models.invoice import Invoice, InvoiceItem
from invoicer.transformers.base import (
    CollectionResource,
    EntityTransformer,
    ItemResource,
    to_date_string,
    to_float,
)


class InvoiceItemTransformer(EntityTransformer):
    ENTITY_TYPE = EntityType.INVOICE_ITEM

    def transform(self, item: InvoiceItem) -> Dict[str, Any]:
        return {
            "id": item.public_id,
            "product_key": item.product_key,
            "notes": item.notes,
            "cost": to_float(item.cost),
            "qty": to_float(item.qty),
            **self.get_defaults(item),
        }


class InvoiceTransformer(EntityTransformer):
    ENTITY_TYPE = EntityType.INVOICE
    DEFAULT_INCLUDES = frozenset({"invoice_items"})
    AVAILABLE_INCLUDES = frozenset({"client"})

    def include_invoice_items(self, invoice: Invoice) -> CollectionResource:
        return self.include_collection(invoice.invoice_items, EntityType.INVOICE_ITEM)

    def include_client(self, invoice: Invoice) -> ItemResource:
        return self.include_item(invoice.client, EntityType.CLIENT)

    def transform(self, invoice: Invoice) -> Dict[str, Any]:
        return {
            "id": invoice.public_id,
            "invoice_number": invoice.invoice_number,
            "invoice_status_id": invoice.invoice_status_id,
            "invoice_date": to_date_string(invoice.invoice_date),
            "due_date": to_date_string(invoice.due_date),
            "po_number": invoice.po_number,
            "discount": to_float(invoice.discount),
            "amount": to_float(invoice.amount),
            "balance": to_float(invoice.balance),
            "public_notes": invoice.public_notes,
            "terms": invoice.terms,
            "client_id": invoice.client_id,
            "user_id": invoice.user_id,
            **self.get_defaults(invoice),
        }
