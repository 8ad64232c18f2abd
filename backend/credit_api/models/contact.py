"""
Credit API - Contact SQLAlchemy Model
======================================

What:  ORM model for the `contacts` table: a counterparty a user can send
       credit to.

The foreign key cascades on delete at the database level as well as through
the ORM relationship, so rows disappear with their user even when deleted
outside the application (e.g. from a psql session).
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from credit_api.database import Base

if TYPE_CHECKING:
    from credit_api.models.user import User


class Contact(Base):
    """A nickname and phone number owned by exactly one user."""

    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    nickname: Mapped[str] = mapped_column(String(100), nullable=False)

    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user: Mapped["User"] = relationship(back_populates="contacts")

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, nickname='{self.nickname}', user_id={self.user_id})>"
