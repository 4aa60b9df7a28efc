"""
Invoicer Backend — Account, User and API Token Models
=======================================================

What:  The tenancy root (Account), the people who act on it (User) and the
       tokens that authenticate API calls on their behalf (ApiToken).
Who:   ApiToken is resolved by the request context dependency on every
       /api/v1 call; User.has_permission decides full-record visibility.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from invoicer.database import Base
from invoicer.models.entity import AccountEntityMixin, EntityType, utcnow


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_key: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Public account identifier echoed in every transformed record",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    currency_code: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    users: Mapped[List["User"]] = relationship(back_populates="account", lazy="raise")

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, account_key='{self.account_key}')>"


class User(AccountEntityMixin, Base):
    """
    A login on an account.

    Permissions are stored as a comma separated list (e.g. "view_all,create_all").
    Admins implicitly hold every permission.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("account_id", "public_id", name="uq_users_account_public_id"),
    )

    entity_type = EntityType.USER

    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    permissions: Mapped[str] = mapped_column(Text, nullable=False, default="")

    account: Mapped[Account] = relationship(back_populates="users", lazy="joined")
    tokens: Mapped[List["ApiToken"]] = relationship(back_populates="user", lazy="raise")

    def has_permission(self, permission: str) -> bool:
        if self.is_admin:
            return True
        granted = {p.strip() for p in (self.permissions or "").split(",") if p.strip()}
        return permission in granted

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', is_admin={self.is_admin})>"


class ApiToken(Base):
    __tablename__ = "api_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="tokens", lazy="joined")

    def __repr__(self) -> str:
        return f"<ApiToken(id={self.id}, name='{self.name}', user_id={self.user_id})>"
