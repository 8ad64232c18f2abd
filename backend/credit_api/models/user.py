"""
Credit API - User SQLAlchemy Model
===================================

What:  ORM model representing the `users` table.
Who:   Used by UserService, AuthService and TransactionService; read by Alembic.

Table Design Rationale:
    - String(36) primary key holding a UUID4: identifiers are opaque strings
      on the wire, so any path segment can be looked up (unknown → 404)
      instead of failing type conversion.
    - username: unique case-insensitively through a functional index on
      lower(username); the stored value keeps the client's casing.
    - password_hash: bcrypt output; NULL until a password is set.
    - credit: float balance, decremented only through the conditional debit
      in TransactionService.
"""

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Float, Index, String, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from credit_api.database import Base

if TYPE_CHECKING:
    from credit_api.models.contact import Contact
    from credit_api.models.transaction import Transaction


class User(Base):
    """
    An account holding a credit balance and a list of contacts.

    Relationships:
        contacts      one-to-many, deleted with the user (delete-orphan, so
                      removing a Contact from the list deletes its row)
        transactions  one-to-many, deleted with the user

    passive_deletes=True leaves the user delete to the foreign keys'
    ON DELETE CASCADE instead of loading both collections first.

    Async note:
        Relationships are never lazy-loaded in this codebase; services use
        selectinload() before touching `contacts` or `transactions`.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="Opaque identifier (UUID4 text)",
    )

    username: Mapped[str] = mapped_column(
        String(256),
        nullable=False,
        comment="Login name; unique regardless of case",
    )

    password_hash: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="bcrypt hash; NULL means the user cannot log in yet",
    )

    credit: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        server_default=text("0"),
        comment="Spendable balance, reduced by each transaction amount",
    )

    contacts: Mapped[List["Contact"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Contact.id",
    )

    transactions: Mapped[List["Transaction"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Transaction.id",
    )

    __table_args__ = (
        Index("uq_users_username_lower", func.lower(username), unique=True),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', credit={self.credit})>"
