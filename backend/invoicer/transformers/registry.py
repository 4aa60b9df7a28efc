"""
Invoicer Backend — Transformer Registry
=========================================

What:  Static mapping from entity type to transformer class.
Why:   Transformers are resolved at import time from the EntityType enum,
       never by building class names from request strings.
"""

from typing import Dict, Optional, Type

from invoicer.models.account import Account, User
from invoicer.models.entity import EntityType
from invoicer.transformers.base import EntityTransformer
from invoicer.transformers.client import ClientTransformer, ContactTransformer
from invoicer.transformers.expense import ExpenseTransformer
from invoicer.transformers.invoice import InvoiceItemTransformer, InvoiceTransformer
from invoicer.transformers.user import UserTransformer
from invoicer.transformers.vendor import VendorContactTransformer, VendorTransformer

TRANSFORMERS: Dict[EntityType, Type[EntityTransformer]] = {
    EntityType.USER: UserTransformer,
    EntityType.CLIENT: ClientTransformer,
    EntityType.CONTACT: ContactTransformer,
    EntityType.VENDOR: VendorTransformer,
    EntityType.VENDOR_CONTACT: VendorContactTransformer,
    EntityType.INVOICE: InvoiceTransformer,
    EntityType.INVOICE_ITEM: InvoiceItemTransformer,
    EntityType.EXPENSE: ExpenseTransformer,
}


def get_transformer_class(entity_type: EntityType) -> Type[EntityTransformer]:
    try:
        return TRANSFORMERS[entity_type]
    except KeyError:
        raise LookupError(f"No transformer registered for entity type '{entity_type.value}'")


def get_transformer(
    entity_type: EntityType,
    account: Account,
    user: Optional[User] = None,
) -> EntityTransformer:
    return get_transformer_class(entity_type)(account, user)
