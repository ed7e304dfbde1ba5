"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations mirror these definitions.

Key concepts:
- UUID primary keys; users and shops live in separate id spaces
- `password` is deferred with raiseload: default reads never fetch it,
  callers that need it ask explicitly with undefer(...)
- Passwords are hashed by a before_flush hook, and only when the
  password attribute itself changed on that write
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    event,
    inspect,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    relationship,
)

from storefront.auth.jwt import create_token
from storefront.auth.password import hash_password, verify_password

logger = structlog.get_logger()


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


class CredentialsMixin:
    """Password, token and reset-token columns shared by users and shops.

    Learn: `password` holds plaintext only between assignment and the
    next flush. The before_flush hook at the bottom of this module
    swaps it for a bcrypt hash, so a persisted row never stores plaintext.
    """

    password: Mapped[str] = mapped_column(
        String(255), nullable=False, deferred=True, deferred_raiseload=True
    )
    reset_password_token: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    reset_password_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def check_password(self, candidate: str) -> bool:
        """Compare a plaintext candidate with the stored hash.

        Returns False when no hash is loaded (the record was read without
        undefer(password)) and when bcrypt cannot verify the hash.
        """
        stored = inspect(self).dict.get("password")
        if not stored:
            logger.info("accounts.no_stored_password", account_id=str(self.id))
            return False
        return verify_password(candidate, stored)

    def get_jwt_token(self) -> str:
        return create_token(self.id)

    def hash_password_if_modified(self) -> bool:
        """Hash a newly assigned plaintext password. Returns True if hashed."""
        history = inspect(self).attrs.password.history
        if not history.added or history.added[0] is None:
            return False
        self.password = hash_password(history.added[0])
        logger.debug("accounts.password_hashed", account_id=str(self.id))
        return True


# ══════════════════════════════════════════════════════════════
# Customers
# ══════════════════════════════════════════════════════════════


class User(CredentialsMixin, Base):
    """A storefront customer (or an admin, by role)."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    role: Mapped[str] = mapped_column(String(30), nullable=False, default="user")
    avatar: Mapped[str] = mapped_column(String(500), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Relationships
    addresses: Mapped[list["Address"]] = relationship(
        back_populates="user",
        order_by="Address.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class Address(Base):
    """A postal address in a user's ordered address book.

    Learn: `position` mirrors the list index. ordering_list rewrites it
    whenever the Python list is reordered, appended to, or shrunk.
    """

    __tablename__ = "addresses"
    __table_args__ = (Index("idx_addresses_user", "user_id", "position"),)

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    address1: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address_type: Mapped[Optional[str]] = mapped_column(
        String(30), nullable=True
    )  # Home, Office, Default...

    user: Mapped["User"] = relationship(back_populates="addresses")


# ══════════════════════════════════════════════════════════════
# Sellers
# ══════════════════════════════════════════════════════════════


class Shop(CredentialsMixin, Base):
    """A seller account. Authenticated separately from users."""

    __tablename__ = "shops"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=new_uuid
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    phone_number: Mapped[str] = mapped_column(String(30), nullable=False)
    role: Mapped[str] = mapped_column(String(30), nullable=False, default="Seller")
    avatar: Mapped[str] = mapped_column(String(500), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


@event.listens_for(Session, "before_flush")
def _hash_modified_passwords(session, flush_context, instances):
    """Hash plaintext passwords on users/shops about to be written."""
    for obj in [*session.new, *session.dirty]:
        if isinstance(obj, CredentialsMixin):
            obj.hash_password_if_modified()
