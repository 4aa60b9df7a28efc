"""
Invoicer Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   A real in-memory SQLite database (aiosqlite) per test, a small
       factory for seeding entities, and an HTTPX client wired to the app
       with the session dependency pointed at that database.

Fixture Hierarchy (all function-scoped):
    ├── db_engine:       In-memory engine with the full schema created
    ├── session_factory: async_sessionmaker bound to db_engine
    ├── db_session:      Session used for seeding
    ├── seed:            Account, three users and their API tokens
    ├── factory:         EntityFactory for clients, invoices, expenses, ...
    └── test_client:     HTTPX AsyncClient against the FastAPI app
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, Optional, Type

# Override settings for testing BEFORE any invoicer imports
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(prefix="invoicer_test_"), "health.db")
)
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from invoicer.context import RequestContext
from invoicer.database import Base, get_db_session
from invoicer.models import (
    Account,
    ApiToken,
    Client,
    Contact,
    Expense,
    Invoice,
    InvoiceItem,
    User,
    Vendor,
    VendorContact,
)
from invoicer.schemas.api import ApiParams

# Rows are created this long ago unless a test says otherwise, so an
# `updated_at` filter of "one hour ago" separates old rows from fresh ones.
OLD = datetime(2024, 1, 1, tzinfo=timezone.utc)


def utc_ago(**delta: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(**delta)


def make_context(user: User, account: Account, **params: Any) -> RequestContext:
    return RequestContext(user=user, account=account, params=ApiParams(**params))


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite shared by every session of one test (StaticPool)."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Seed Data
# ══════════════════════════════════════════════════════════════════════════

class EntityFactory:
    """
    Creates committed rows with sequential per-model public ids.

    Every method commits, so the rows are visible to sessions the code under
    test opens, and returns the ORM object for assertions.
    """

    def __init__(self, session: AsyncSession, account: Account):
        self.session = session
        self.account = account
        self._public_ids: Dict[Type[Any], int] = {}

    async def _add(self, model: Type[Any], user: User, **fields: Any) -> Any:
        public_id = self._public_ids.get(model, 0) + 1
        self._public_ids[model] = public_id
        fields.setdefault("public_id", public_id)
        fields.setdefault("created_at", OLD + timedelta(seconds=public_id))
        fields.setdefault("updated_at", OLD)
        entity = model(account_id=self.account.id, user_id=user.id, **fields)
        self.session.add(entity)
        await self.session.commit()
        return entity

    async def client(self, user: User, **fields: Any) -> Client:
        fields.setdefault("name", "Acme Corp")
        return await self._add(Client, user, **fields)

    async def contact(self, client: Client, user: Optional[User] = None, **fields: Any) -> Contact:
        fields.setdefault("email", "billing@acme.test")
        return await self._add(Contact, user or _owner(client), client_id=client.id, **fields)

    async def vendor(self, user: User, **fields: Any) -> Vendor:
        fields.setdefault("name", "Paper Supplies Ltd")
        return await self._add(Vendor, user, **fields)

    async def vendor_contact(self, vendor: Vendor, **fields: Any) -> VendorContact:
        return await self._add(VendorContact, _owner(vendor), vendor_id=vendor.id, **fields)

    async def invoice(self, client: Client, user: Optional[User] = None, **fields: Any) -> Invoice:
        fields.setdefault("invoice_number", f"INV-{self._public_ids.get(Invoice, 0) + 1:04d}")
        return await self._add(Invoice, user or _owner(client), client_id=client.id, **fields)

    async def invoice_item(self, invoice: Invoice, **fields: Any) -> InvoiceItem:
        fields.setdefault("product_key", "consulting")
        return await self._add(InvoiceItem, _owner(invoice), invoice_id=invoice.id, **fields)

    async def expense(self, user: User, **fields: Any) -> Expense:
        return await self._add(Expense, user, **fields)


def _owner(entity: Any) -> SimpleNamespace:
    return SimpleNamespace(id=entity.user_id)


@pytest_asyncio.fixture
async def seed(db_session):
    """
    One account with three users:
        admin:  is_admin (holds every permission, including view_all)
        alice:  no permissions
        bob:    no permissions
    Each has an API token named after them ("admin-token", ...).
    """
    account = Account(account_key="acct-key-123", name="Test Co", currency_code="USD")
    db_session.add(account)
    await db_session.flush()

    users = {}
    for public_id, (key, is_admin) in enumerate(
        [("admin", True), ("alice", False), ("bob", False)],
        start=1,
    ):
        user = User(
            account_id=account.id,
            public_id=public_id,
            first_name=key.title(),
            email=f"{key}@example.test",
            is_admin=is_admin,
            created_at=OLD,
            updated_at=OLD,
        )
        db_session.add(user)
        await db_session.flush()
        db_session.add(
            ApiToken(account_id=account.id, user_id=user.id, name=key, token=f"{key}-token")
        )
        users[key] = user

    await db_session.commit()
    return SimpleNamespace(account=account, **users)


@pytest.fixture
def factory(db_session, seed):
    return EntityFactory(db_session, seed.account)


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient routed straight into the FastAPI app.

    raise_app_exceptions=False: unexpected errors come back as the 500
    response the catch-all handler renders instead of being re-raised.
    """
    from invoicer.main import app

    async def override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
