"""Vendor and vendor contact transformers."""

from typing import Any, Dict

from invoicer.models.entity import EntityType
from invoicer.models.vendor import Vendor, VendorContact
from invoicer.transformers.base import CollectionResource, EntityTransformer


class VendorContactTransformer(EntityTransformer):
    ENTITY_TYPE = EntityType.VENDOR_CONTACT

    def transform(self, contact: VendorContact) -> Dict[str, Any]:
        return {
            "id": contact.public_id,
            "first_name": contact.first_name,
            "last_name": contact.last_name,
            "email": contact.email,
            "phone": contact.phone,
            "is_primary": bool(contact.is_primary),
            **self.get_defaults(contact),
        }


class VendorTransformer(EntityTransformer):
    ENTITY_TYPE = EntityType.VENDOR
    DEFAULT_INCLUDES = frozenset({"vendor_contacts"})
    AVAILABLE_INCLUDES = frozenset({"expenses"})

    def include_vendor_contacts(self, vendor: Vendor) -> CollectionResource:
        return self.include_collection(vendor.vendor_contacts, EntityType.VENDOR_CONTACT)

    def include_expenses(self, vendor: Vendor) -> CollectionResource:
        return self.include_collection(vendor.expenses, EntityType.EXPENSE)

    def transform(self, vendor: Vendor) -> Dict[str, Any]:
        return {
            "id": vendor.public_id,
            "name": vendor.name,
            "user_id": vendor.user_id,
            "address1": vendor.address1,
            "city": vendor.city,
            "work_phone": vendor.work_phone,
            "website": vendor.website,
            "vat_number": vendor.vat_number,
            "private_notes": vendor.private_notes,
            **self.get_defaults(vendor),
        }
