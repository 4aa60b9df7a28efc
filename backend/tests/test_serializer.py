"""
Invoicer Backend — Response Serializer Tests
==============================================

What:  Envelope shaping, output modes, pagination clamping and HTTP emission.
How:   Transient ORM objects for item/collection rendering; responses are
       inspected directly (no HTTP round trip).

What we test:
    ✅ Flat items embed default includes and requested available includes
    ✅ Typed items carry type/id/attributes/relationships and `included`
    ✅ Included objects appear once even when referenced twice
    ✅ Missing related items render as null
    ✅ Materialized collections carry no pagination meta
    ✅ emit() index key handling and API headers; emit_error() body and status
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from invoicer.config import settings
from invoicer.models import Account, Client, Contact, EntityType, Expense, Invoice, InvoiceItem, User
from invoicer.services.serializer import (
    Envelope,
    build_collection,
    build_item,
    clamp_page_size,
    emit,
    emit_error,
)
from invoicer.transformers.base import OutputMode
from invoicer.transformers.registry import get_transformer

UPDATED = datetime(2024, 3, 1, tzinfo=timezone.utc)


def body(response):
    return json.loads(response.body)


@pytest.fixture
def account():
    return Account(id=1, account_key="acct-key-123", currency_code="USD")


@pytest.fixture
def user():
    return User(id=10, public_id=1, email="alice@example.test", permissions="", updated_at=UPDATED)


@pytest.fixture
def client():
    client = Client(
        id=5, public_id=3, user_id=10, name="Acme Corp", currency_code="",
        balance=Decimal("0"), paid_to_date=Decimal("0"), updated_at=UPDATED,
    )
    client.contacts = [
        Contact(public_id=1, user_id=10, email="ann@acme.test", updated_at=UPDATED),
        Contact(public_id=2, user_id=10, email="bo@acme.test", updated_at=UPDATED),
    ]
    client.invoices = []
    return client


def make_invoice(public_id, client):
    invoice = Invoice(
        public_id=public_id, user_id=10, client_id=client.id,
        invoice_number=f"INV-{public_id}", updated_at=UPDATED,
    )
    invoice.client = client
    invoice.invoice_items = [
        InvoiceItem(public_id=public_id * 10, user_id=10, product_key="hours", updated_at=UPDATED),
    ]
    return invoice


class TestBuildItemFlat:
    def test_default_include_embedded(self, account, user, client):
        transformer = get_transformer(EntityType.CLIENT, account, user)

        envelope = build_item(client, transformer, OutputMode.FLAT, {"contacts"})

        assert envelope.meta is None
        assert envelope.payload["name"] == "Acme Corp"
        assert [c["email"] for c in envelope.payload["contacts"]] == ["ann@acme.test", "bo@acme.test"]
        assert "invoices" not in envelope.payload
        assert "type" not in envelope.payload
        assert all("type" not in c for c in envelope.payload["contacts"])

    def test_available_include_only_when_requested(self, account, user, client):
        transformer = get_transformer(EntityType.CLIENT, account, user)

        envelope = build_item(client, transformer, OutputMode.FLAT, {"contacts", "invoices"})

        assert envelope.payload["invoices"] == []

    def test_nested_include_follows_path(self, account, user, client):
        invoice = make_invoice(7, client)
        transformer = get_transformer(EntityType.INVOICE, account, user)

        envelope = build_item(
            invoice, transformer, OutputMode.FLAT, {"invoice_items", "client", "client.contacts"}
        )

        assert envelope.payload["invoice_items"][0]["product_key"] == "hours"
        assert envelope.payload["client"]["id"] == 3
        assert len(envelope.payload["client"]["contacts"]) == 2

    def test_missing_related_item_is_null(self, account, user):
        expense = Expense(public_id=4, user_id=10, updated_at=UPDATED)
        expense.vendor = None
        transformer = get_transformer(EntityType.EXPENSE, account, user)

        envelope = build_item(expense, transformer, OutputMode.FLAT, {"vendor"})

        assert envelope.payload["vendor"] is None


class TestBuildItemTyped:
    def test_resource_object_shape(self, account, user, client):
        transformer = get_transformer(EntityType.CLIENT, account, user)

        document = build_item(client, transformer, OutputMode.TYPED, {"contacts"}).payload

        data = document["data"]
        assert data["type"] == "client"
        assert data["id"] == "3"
        assert "id" not in data["attributes"]
        assert data["attributes"]["name"] == "Acme Corp"
        assert data["relationships"]["contacts"]["data"] == [
            {"type": "contact", "id": "1"},
            {"type": "contact", "id": "2"},
        ]
        assert {(o["type"], o["id"]) for o in document["included"]} == {
            ("contact", "1"),
            ("contact", "2"),
        }

    def test_no_relationships_no_included(self, account, user):
        transformer = get_transformer(EntityType.USER, account, user)

        document = build_item(user, transformer, OutputMode.TYPED).payload

        assert "relationships" not in document["data"]
        assert "included" not in document

    def test_missing_related_item_is_null_linkage(self, account, user):
        expense = Expense(public_id=4, user_id=10, updated_at=UPDATED)
        expense.client = None
        transformer = get_transformer(EntityType.EXPENSE, account, user)

        document = build_item(expense, transformer, OutputMode.TYPED, {"client"}).payload

        assert document["data"]["relationships"]["client"] == {"data": None}


class TestBuildCollection:
    @pytest.mark.asyncio
    async def test_list_source_has_no_meta(self, account, user, client):
        transformer = get_transformer(EntityType.CLIENT, account, user)

        envelope = await build_collection([client, client], transformer, includes={"contacts"})

        assert envelope.meta is None
        assert len(envelope.payload) == 2

    @pytest.mark.asyncio
    async def test_typed_included_deduplicated(self, account, user, client):
        invoices = [make_invoice(1, client), make_invoice(2, client)]
        transformer = get_transformer(EntityType.INVOICE, account, user)

        document = (
            await build_collection(
                invoices,
                transformer,
                OutputMode.TYPED,
                {"invoice_items", "client", "client.contacts"},
            )
        ).payload

        assert [d["id"] for d in document["data"]] == ["1", "2"]
        keys = [(o["type"], o["id"]) for o in document["included"]]
        assert len(keys) == len(set(keys))
        assert keys.count(("client", "3")) == 1

    @pytest.mark.asyncio
    async def test_query_source_requires_session(self, account, user):
        from sqlalchemy import select

        transformer = get_transformer(EntityType.CLIENT, account, user)
        with pytest.raises(ValueError):
            await build_collection(select(Client), transformer)


class TestClampPageSize:
    def test_default_when_unset(self):
        assert clamp_page_size(None) == settings.default_api_page_size

    def test_clamped_to_maximum(self, monkeypatch):
        monkeypatch.setattr(settings, "max_api_page_size", 100)
        assert clamp_page_size(500) == 100

    @pytest.mark.parametrize("requested", [0, -5])
    def test_clamped_to_one(self, requested):
        assert clamp_page_size(requested) == 1


class TestEmit:
    def test_wraps_payload_and_meta(self):
        response = emit(Envelope(payload=[{"id": 1}], meta={"total": 40}))

        assert response.status_code == 200
        assert body(response) == {"data": [{"id": 1}], "meta": {"total": 40}}
        assert response.headers["X-Total-Count"] == "40"
        assert response.headers["X-Api-Version"] == settings.api_version
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_custom_index_key(self):
        response = emit(Envelope(payload={"id": 1}), index_key="client")
        assert body(response) == {"client": {"id": 1}}

    def test_index_none_sends_bare_payload_and_drops_meta(self):
        response = emit(Envelope(payload=[{"id": 1}, {"id": 2}], meta={"total": 2}), index_key="none")
        assert body(response) == [{"id": 1}, {"id": 2}]

    def test_mapping_meta_split_off(self):
        response = emit({"name": "Acme", "meta": {"total": 1}})
        assert body(response) == {"data": {"name": "Acme"}, "meta": {"total": 1}}

    def test_pretty_printed(self):
        response = emit(Envelope(payload={"id": 1}))
        assert response.body.decode().startswith('{\n    "data"')

    def test_extra_headers(self):
        response = emit(Envelope(payload=[]), headers={"X-Extra": "1"})
        assert response.headers["X-Extra"] == "1"
        assert response.headers["X-Total-Count"] == "0"

    @pytest.mark.parametrize("mode", [OutputMode.FLAT, OutputMode.TYPED])
    def test_built_item_body_matches_payload(self, account, user, client, mode):
        transformer = get_transformer(EntityType.CLIENT, account, user)
        envelope = build_item(client, transformer, mode, {"contacts"})

        response = emit(envelope)

        assert body(response) == {"data": envelope.payload}


class TestEmitError:
    def test_body_and_status(self):
        response = emit_error("bad", 404)

        assert response.status_code == 404
        assert body(response) == {"error": "bad"}
        assert response.headers["X-Api-Version"] == settings.api_version

    def test_default_status_is_400(self):
        assert emit_error("nope").status_code == 400
