"""
Credit API - User Service
==========================

What:  CRUD for users, including the contacts created or replaced together
       with a user.
Who:   Called by routes/users.py.

Error Handling Strategy:
    - Missing user                  → NotFoundError (404)
    - Username taken / weak password → ValidationError (400)
    - Any other SQLAlchemy failure   → DatabaseError (500), details logged only

Eager loading:
    Every query that ends up in a UserResponse uses selectinload(User.contacts).
    Lazy loading is not available on an AsyncSession, so a missing
    selectinload shows up as a MissingGreenlet error rather than an N+1.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool

from credit_api.exceptions import DatabaseError, NotFoundError, ValidationError
from credit_api.models import Contact, User
from credit_api.schemas.user import UserCreate, UserResponse, UserUpdate
from credit_api.security import hash_password, password_policy_violations

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic layer for user operations.

    Responsibilities:
        - list_users() / get_user(): reads, contacts included
        - create_user(): insert with optional password and initial contacts
        - update_user(): replace username, credit and contact list
        - delete_user(): delete, letting the foreign keys cascade
    """

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        try:
            result = await db.execute(
                select(User).options(selectinload(User.contacts)).order_by(User.username)
            )
            users = result.scalars().all()
            return [UserResponse.model_validate(user) for user in users]
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_user(self, db: AsyncSession, user_id: str) -> UserResponse:
        """
        Retrieve a single user with contacts.

        Raises:
            NotFoundError: No user has this ID (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        user = await self._load_user(db, user_id, with_contacts=True)
        return UserResponse.model_validate(user)

    async def create_user(self, db: AsyncSession, payload: UserCreate) -> UserResponse:
        """
        Create a user, optionally with a password and initial contacts.

        Workflow:
            1. Reject a username already taken (case-insensitive)
            2. Check the password against the policy, then hash it with bcrypt
               in a worker thread (hashing is CPU-bound by design)
            3. Insert the user and its contacts in one flush; contact.user_id
               is filled in by the relationship

        Raises:
            ValidationError: Duplicate username or password policy violation
            DatabaseError: Insert failed
        """
        await self._ensure_username_available(db, payload.username)

        password_hash: Optional[str] = None
        if payload.password is not None:
            violations = password_policy_violations(payload.password)
            if violations:
                raise ValidationError(
                    message="Password does not meet the requirements.",
                    field="password",
                    context={"violations": violations},
                )
            password_hash = await run_in_threadpool(hash_password, payload.password)

        user = User(
            username=payload.username,
            credit=payload.credit,
            password_hash=password_hash,
            contacts=[
                Contact(nickname=c.nickname, phone_number=c.phone_number)
                for c in payload.contacts
            ],
        )

        try:
            db.add(user)
            await db.flush()
        except IntegrityError:
            raise self._username_taken(payload.username)
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the user. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info(
            "User created: %s (credit=%.2f, contacts=%d)",
            user.id, user.credit, len(user.contacts),
        )
        return UserResponse.model_validate(user)

    async def update_user(self, db: AsyncSession, user_id: str, payload: UserUpdate) -> None:
        """
        Replace a user's username, credit and contact list.

        Contacts dropped from the list are deleted (delete-orphan); their
        transactions keep existing with contact_id set to NULL by the
        foreign key.
        """
        user = await self._load_user(db, user_id, with_contacts=True)
        await self._ensure_username_available(db, payload.username, exclude_user_id=user_id)

        user.username = payload.username
        user.credit = payload.credit
        user.contacts = [
            Contact(nickname=c.nickname, phone_number=c.phone_number)
            for c in payload.contacts
        ]

        try:
            await db.flush()
        except IntegrityError:
            raise self._username_taken(payload.username)
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="A database error occurred.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

        logger.info("User %s updated (credit=%.2f, contacts=%d)", user_id, user.credit, len(user.contacts))

    async def delete_user(self, db: AsyncSession, user_id: str) -> None:
        """Delete a user; contacts and transactions go with it via ON DELETE CASCADE."""
        user = await self._load_user(db, user_id)
        try:
            await db.delete(user)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the user. Please try again.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )
        logger.info("User %s deleted", user_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _load_user(
        self, db: AsyncSession, user_id: str, with_contacts: bool = False
    ) -> User:
        query = select(User).where(User.id == user_id)
        if with_contacts:
            query = query.options(selectinload(User.contacts))
        try:
            result = await db.execute(query)
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the user. Please try again.",
                context={"user_id": user_id},
            )

        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user

    async def _ensure_username_available(
        self,
        db: AsyncSession,
        username: str,
        exclude_user_id: Optional[str] = None,
    ) -> None:
        query = select(User.id).where(func.lower(User.username) == func.lower(username))
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)
        try:
            result = await db.execute(query)
            existing = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error checking username: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

        if existing is not None:
            raise self._username_taken(username)

    @staticmethod
    def _username_taken(username: str) -> ValidationError:
        logger.warning("Rejected duplicate username '%s'", username)
        return ValidationError(
            message=f"Username '{username}' is already taken.",
            field="username",
        )


# Stateless; one shared instance
user_service = UserService()
