"""Client and contact transformers."""

from typing import Any, Dict

from invoicer.models.client import Client, Contact
from invoicer.models.entity import EntityType
from invoicer.transformers.base import (
    CollectionResource,
    EntityTransformer,
    to_float,
)


class ContactTransformer(EntityTransformer):
    ENTITY_TYPE = EntityType.CONTACT

    def transform(self, contact: Contact) -> Dict[str, Any]:
        return {
            "id": contact.public_id,
            "first_name": contact.first_name,
            "last_name": contact.last_name,
            "email": contact.email,
            "phone": contact.phone,
            "is_primary": bool(contact.is_primary),
            **self.get_defaults(contact),
        }


class ClientTransformer(EntityTransformer):
    """
    Contacts are always embedded: a client without its contacts is not
    useful to API consumers building invoices or statements.
    """

    ENTITY_TYPE = EntityType.CLIENT
    DEFAULT_INCLUDES = frozenset({"contacts"})
    AVAILABLE_INCLUDES = frozenset({"invoices", "expenses"})

    def include_contacts(self, client: Client) -> CollectionResource:
        return self.include_collection(client.contacts, EntityType.CONTACT)

    def include_invoices(self, client: Client) -> CollectionResource:
        return self.include_collection(client.invoices, EntityType.INVOICE)

    def include_expenses(self, client: Client) -> CollectionResource:
        return self.include_collection(client.expenses, EntityType.EXPENSE)

    def transform(self, client: Client) -> Dict[str, Any]:
        return {
            "id": client.public_id,
            "name": client.name,
            "balance": to_float(client.balance),
            "paid_to_date": to_float(client.paid_to_date),
            "user_id": client.user_id,
            "address1": client.address1,
            "address2": client.address2,
            "city": client.city,
            "state": client.state,
            "postal_code": client.postal_code,
            "work_phone": client.work_phone,
            "website": client.website,
            "private_notes": client.private_notes,
            "currency_code": client.currency_code or self.account.currency_code,
            **self.get_defaults(client),
        }
