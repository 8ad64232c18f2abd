"""
Credit API - Contact Service
=============================

What:  Adds and removes contacts of an existing user.
Who:   Called by routes/contacts.py.

A contact is only ever addressed through its owner: deleting contact 7 of
user A fails with 404 when contact 7 belongs to user B.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from credit_api.exceptions import DatabaseError, NotFoundError
from credit_api.models import Contact, User
from credit_api.schemas.user import ContactCreate, ContactResponse

logger = logging.getLogger(__name__)


class ContactService:

    async def add_contact(
        self, db: AsyncSession, user_id: str, payload: ContactCreate
    ) -> ContactResponse:
        await self._ensure_user_exists(db, user_id)

        contact = Contact(
            user_id=user_id,
            nickname=payload.nickname,
            phone_number=payload.phone_number,
        )
        try:
            db.add(contact)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error adding contact for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not add the contact. Please try again.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

        logger.info("Contact %s added to user %s", contact.id, user_id)
        return ContactResponse.model_validate(contact)

    async def delete_contact(self, db: AsyncSession, user_id: str, contact_id: int) -> None:
        """
        Delete one of the user's contacts.

        Transactions that referenced it keep their amount and date; the
        foreign key's ON DELETE SET NULL clears their contact_id.
        """
        await self._ensure_user_exists(db, user_id)

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

        try:
            await db.delete(contact)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting contact %s: %s", contact_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the contact. Please try again.",
                context={"contact_id": contact_id, "error_type": type(e).__name__},
            )

        logger.info("Contact %s removed from user %s", contact_id, user_id)

    async def _ensure_user_exists(self, db: AsyncSession, user_id: str) -> None:
        try:
            result = await db.execute(select(User.id).where(User.id == user_id))
            found = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})

        if found is None:
            raise NotFoundError(resource="user", resource_id=user_id)


contact_service = ContactService()
