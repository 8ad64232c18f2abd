"""
Credit API - Transaction SQLAlchemy Model
==========================================

What:  ORM model for the `transactions` table: one debit of a user's credit
       towards one of their contacts.

Table Design Rationale:
    - user_id: ON DELETE CASCADE, the history goes with the account.
    - contact_id: ON DELETE SET NULL, removing a contact keeps the history
      of what was spent; the transaction simply loses its counterparty.
    - date: timezone-aware; defaults to the insert time (UTC) when the
      client does not supply one.

Query Patterns:
    - All transactions of a user:            WHERE user_id = :uid
    - Transactions of a user with a contact: WHERE user_id = :uid AND contact_id = :cid
      → both served by idx_transactions_user_contact
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from credit_api.database import Base

if TYPE_CHECKING:
    from credit_api.models.contact import Contact
    from credit_api.models.user import User


class Transaction(Base):
    """A positive amount debited from a user's credit towards a contact."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    amount: Mapped[float] = mapped_column(Float, nullable=False)

    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    contact_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("contacts.id", ondelete="SET NULL"),
        nullable=True,
    )

    user: Mapped["User"] = relationship(back_populates="transactions")

    # One-directional: a Contact does not track its transactions
    contact: Mapped[Optional["Contact"]] = relationship()

    __table_args__ = (
        Index("idx_transactions_user_contact", "user_id", "contact_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, amount={self.amount}, "
            f"user_id={self.user_id}, contact_id={self.contact_id})>"
        )
