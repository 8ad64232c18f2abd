"""
Credit API - Transaction Service (Credit Debit)
================================================

What:  Creates transactions by debiting a user's credit, and lists the
       transaction history of a user.
Who:   Called by routes/transactions.py.

Debit Flow (POST /Users/{user_id}/transactions?contactId=):
    ┌──────────┐   ┌──────────────┐   ┌───────────┐   ┌──────────────┐   ┌─────────┐
    │  User    │──▶│  Contact of  │──▶│ amount>0  │──▶│  conditional │──▶│ insert  │
    │  exists  │   │  that user   │   │ <= credit │   │  UPDATE      │   │ row     │
    └──────────┘   └──────────────┘   └───────────┘   └──────────────┘   └─────────┘
        404              404               400             400 if 0 rows

Concurrency:
    The balance check that matters is inside the UPDATE statement itself:

        UPDATE users SET credit = credit - :amount
        WHERE id = :user_id AND credit >= :amount

    Two concurrent requests for the same user serialize on the row lock; the
    second one re-evaluates `credit >= :amount` against the committed balance
    and matches zero rows if the first one spent the credit. The Python-side
    comparison before it only exists to reject the obvious case early with
    the current balance in the error details.

    The debit and the insert share the request's database transaction, so a
    failed insert rolls the debit back (get_db_session).
"""

import logging
import math
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from credit_api.exceptions import (
    DatabaseError,
    InsufficientCreditError,
    NotFoundError,
    ValidationError,
)
from credit_api.models import Contact, Transaction, User
from credit_api.schemas.transaction import TransactionCreate, TransactionResponse
from credit_api.schemas.user import ContactResponse

logger = logging.getLogger(__name__)


class TransactionService:
    """
    Business logic for transactions.

    Responsibilities:
        - create_transaction(): validate and debit, then record
        - list_transactions(): all transactions of a user
        - get_transaction(): one transaction of a user
        - list_transactions_by_contact(): a user's transactions with one contact

    Empty listings raise NotFoundError: a user with no transactions answers
    404, the same as an unknown user, with a distinct message.
    """

    async def create_transaction(
        self,
        db: AsyncSession,
        user_id: str,
        contact_id: int,
        payload: TransactionCreate,
    ) -> TransactionResponse:
        """
        Debit `payload.amount` from the user's credit towards one of their contacts.

        Raises:
            NotFoundError: Unknown user, or contact not owned by the user
            ValidationError: Amount is not a positive finite number
            InsufficientCreditError: Amount exceeds the credit (also when a
                concurrent debit got there first)
            DatabaseError: The debit or the insert failed
        """
        user = await self._get_user(db, user_id)

        try:
            result = await db.execute(
                select(Contact).where(Contact.id == contact_id, Contact.user_id == user_id)
            )
            contact = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching contact %s: %s", contact_id, str(e))
            raise DatabaseError(context={"contact_id": contact_id})

        if contact is None:
            raise NotFoundError(resource="contact", resource_id=str(contact_id))

        amount = payload.amount
        if not math.isfinite(amount) or amount <= 0:
            logger.warning("Rejected transaction for user %s: amount %r", user_id, amount)
            raise ValidationError(
                message="Transaction total must be greater than zero.",
                field="amount",
            )

        if amount > user.credit:
            logger.warning(
                "Rejected transaction for user %s: amount %.2f exceeds credit %.2f",
                user_id, amount, user.credit,
            )
            raise InsufficientCreditError(requested=amount, available=user.credit)

        try:
            debit = await db.execute(
                update(User)
                .where(User.id == user_id, User.credit >= amount)
                .values(credit=User.credit - amount)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error("Database error debiting user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="error in save.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

        if debit.rowcount != 1:
            # Balance changed between the read above and the UPDATE
            logger.warning("Concurrent debit left user %s without enough credit for %.2f", user_id, amount)
            raise InsufficientCreditError(requested=amount)

        transaction = Transaction(
            amount=amount,
            date=payload.date or datetime.now(timezone.utc),
            user_id=user_id,
            contact_id=contact.id,
        )
        try:
            db.add(transaction)
            await db.flush()
            await db.refresh(user, attribute_names=["credit"])
        except SQLAlchemyError as e:
            logger.error("Database error saving transaction for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="error in save.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

        logger.info(
            "Transaction %s: user %s paid %.2f to contact %s (credit left %.2f)",
            transaction.id, user_id, amount, contact.id, user.credit,
        )
        return TransactionResponse(
            id=transaction.id,
            amount=transaction.amount,
            date=transaction.date,
            user_id=user_id,
            contact_id=contact.id,
            contact=ContactResponse.model_validate(contact),
        )

    async def list_transactions(self, db: AsyncSession, user_id: str) -> List[TransactionResponse]:
        await self._get_user(db, user_id)
        transactions = await self._query(
            db, Transaction.user_id == user_id,
        )
        if not transactions:
            raise NotFoundError(
                resource="transaction",
                message="No transactions found for this user.",
                context={"user_id": user_id},
            )
        return transactions

    async def get_transaction(
        self, db: AsyncSession, user_id: str, transaction_id: int
    ) -> TransactionResponse:
        transactions = await self._query(
            db, Transaction.id == transaction_id, Transaction.user_id == user_id,
        )
        if not transactions:
            raise NotFoundError(
                resource="transaction",
                message="Transaction not found.",
                context={"user_id": user_id, "transaction_id": transaction_id},
            )
        return transactions[0]

    async def list_transactions_by_contact(
        self, db: AsyncSession, user_id: str, contact_id: int
    ) -> List[TransactionResponse]:
        await self._get_user(db, user_id)
        transactions = await self._query(
            db, Transaction.user_id == user_id, Transaction.contact_id == contact_id,
        )
        if not transactions:
            raise NotFoundError(
                resource="transaction",
                message="No transactions found for this contact.",
                context={"user_id": user_id, "contact_id": contact_id},
            )
        return transactions

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_user(self, db: AsyncSession, user_id: str) -> User:
        try:
            result = await db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})

        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user

    async def _query(self, db: AsyncSession, *criteria) -> List[TransactionResponse]:
        """Run a transaction query with the contact eagerly loaded, oldest first."""
        try:
            result = await db.execute(
                select(Transaction)
                .options(selectinload(Transaction.contact))
                .where(*criteria)
                .order_by(Transaction.date, Transaction.id)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing transactions: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve transactions. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [TransactionResponse.model_validate(row) for row in rows]


transaction_service = TransactionService()
