"""
Invoicer Backend — Transformer Unit Tests
===========================================

What:  Field mapping of each transformer and the registry lookup.
How:   Transient ORM objects (never added to a session), so no database.

What we test:
    ✅ Default fields (account_key, is_owner, updated_at, archived_at, is_deleted)
    ✅ Entity specific fields and formatting (money as float, ISO dates)
    ✅ Default and available includes per entity type
    ✅ Registry returns a transformer for every model, and rejects others
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from invoicer.models import MODELS, Account, Client, Contact, EntityType, Expense, Invoice, User
from invoicer.transformers.base import (
    CollectionResource,
    ItemResource,
    OutputMode,
    to_timestamp,
)
from invoicer.transformers.client import ClientTransformer
from invoicer.transformers.registry import get_transformer, get_transformer_class

UPDATED = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_account():
    return Account(id=1, account_key="acct-key-123", currency_code="EUR")


def make_user(**fields):
    fields.setdefault("id", 10)
    fields.setdefault("public_id", 1)
    fields.setdefault("email", "alice@example.test")
    fields.setdefault("permissions", "")
    fields.setdefault("is_admin", False)
    return User(account_id=1, updated_at=UPDATED, **fields)


def make_client(**fields):
    fields.setdefault("id", 5)
    fields.setdefault("public_id", 3)
    fields.setdefault("user_id", 10)
    return Client(
        account_id=1,
        name="Acme Corp",
        balance=Decimal("125.50"),
        paid_to_date=Decimal("0"),
        currency_code="",
        updated_at=UPDATED,
        is_deleted=False,
        **fields,
    )


class TestOutputMode:
    def test_jsonapi_is_typed(self):
        assert OutputMode.from_param("jsonapi") is OutputMode.TYPED

    @pytest.mark.parametrize("value", ["array", "", None, "JSONAPI", "xml"])
    def test_anything_else_is_flat(self, value):
        assert OutputMode.from_param(value) is OutputMode.FLAT


class TestDefaults:
    """Fields every transformer adds through get_defaults()."""

    def setup_method(self):
        self.account = make_account()
        self.user = make_user()

    def test_owner_flag_and_account_key(self):
        fields = ClientTransformer(self.account, self.user).transform(make_client())

        assert fields["id"] == 3
        assert fields["account_key"] == "acct-key-123"
        assert fields["is_owner"] is True
        assert fields["updated_at"] == int(UPDATED.timestamp())
        assert fields["archived_at"] is None
        assert fields["is_deleted"] is False

    def test_not_owner_for_other_users_record(self):
        fields = ClientTransformer(self.account, self.user).transform(make_client(user_id=99))
        assert fields["is_owner"] is False

    def test_not_owner_without_current_user(self):
        fields = ClientTransformer(self.account).transform(make_client())
        assert fields["is_owner"] is False

    def test_archived_record(self):
        archived = datetime(2024, 4, 1, tzinfo=timezone.utc)
        client = make_client()
        client.deleted_at = archived
        client.is_deleted = True

        fields = ClientTransformer(self.account, self.user).transform(client)

        assert fields["archived_at"] == int(archived.timestamp())
        assert fields["is_deleted"] is True

    def test_naive_datetime_taken_as_utc(self):
        naive = datetime(2024, 3, 1, 12, 0)
        assert to_timestamp(naive) == int(UPDATED.timestamp())


class TestEntityFields:
    def setup_method(self):
        self.account = make_account()
        self.user = make_user()

    def test_client_money_and_currency_fallback(self):
        fields = ClientTransformer(self.account, self.user).transform(make_client())

        assert fields["balance"] == 125.5
        assert fields["paid_to_date"] == 0.0
        assert fields["currency_code"] == "EUR"

    def test_invoice_dates_are_iso_strings(self):
        invoice = Invoice(
            public_id=7,
            user_id=10,
            client_id=5,
            invoice_number="INV-0007",
            invoice_status_id=2,
            invoice_date=date(2024, 3, 1),
            due_date=None,
            amount=Decimal("99.99"),
            updated_at=UPDATED,
        )

        fields = get_transformer(EntityType.INVOICE, self.account, self.user).transform(invoice)

        assert fields["invoice_number"] == "INV-0007"
        assert fields["invoice_date"] == "2024-03-01"
        assert fields["due_date"] is None
        assert fields["amount"] == 99.99

    def test_expense_exchange_rate(self):
        expense = Expense(
            public_id=2,
            user_id=10,
            amount=Decimal("10"),
            exchange_rate=Decimal("1.2500"),
            currency_code="GBP",
            should_be_invoiced=True,
            updated_at=UPDATED,
        )

        fields = get_transformer(EntityType.EXPENSE, self.account, self.user).transform(expense)

        assert fields["exchange_rate"] == 1.25
        assert fields["currency_code"] == "GBP"
        assert fields["should_be_invoiced"] is True
        assert fields["vendor_id"] is None

    def test_user_permissions_and_self_ownership(self):
        other = make_user(id=11, public_id=2, email="bob@example.test", permissions="view_all, edit_all")
        transformer = get_transformer(EntityType.USER, self.account, self.user)

        own = transformer.transform(self.user)
        theirs = transformer.transform(other)

        assert own["is_owner"] is True
        assert theirs["is_owner"] is False
        assert theirs["permissions"] == ["view_all", "edit_all"]


class TestIncludes:
    def setup_method(self):
        self.account = make_account()
        self.user = make_user()

    def test_client_include_sets(self):
        transformer = ClientTransformer(self.account, self.user)
        assert transformer.default_includes() == {"contacts"}
        assert transformer.available_includes() == {"invoices", "expenses"}

    def test_collection_include_uses_related_transformer(self):
        client = make_client()
        client.contacts = [Contact(public_id=1, user_id=10, email="a@acme.test", updated_at=UPDATED)]

        resource = ClientTransformer(self.account, self.user).include(client, "contacts")

        assert isinstance(resource, CollectionResource)
        assert resource.transformer.entity_type is EntityType.CONTACT
        assert [c.email for c in resource.entities] == ["a@acme.test"]

    def test_missing_item_include(self):
        expense = Expense(public_id=1, user_id=10, updated_at=UPDATED)
        expense.vendor = None

        resource = get_transformer(EntityType.EXPENSE, self.account).include(expense, "vendor")

        assert isinstance(resource, ItemResource)
        assert resource.entity is None

    def test_unknown_relation_raises(self):
        with pytest.raises(AttributeError):
            ClientTransformer(self.account).include(make_client(), "payments")


class TestRegistry:
    def test_every_model_has_a_transformer(self):
        for entity_type in MODELS:
            assert get_transformer_class(entity_type).ENTITY_TYPE is entity_type

    def test_unregistered_type_raises(self):
        with pytest.raises(LookupError):
            get_transformer_class(EntityType.ACCOUNT)
