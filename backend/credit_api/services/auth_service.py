"""
Credit API - Auth Service
==========================

What:  Username/password check and password reset.
How:   bcrypt via credit_api.security, run in Starlette's threadpool so a
       slow hash never stalls the event loop.

Login deliberately answers only true/false. There are no tokens, sessions or
cookies; callers treat the boolean as the whole result.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from credit_api.exceptions import DatabaseError, NotFoundError, ValidationError
from credit_api.models import User
from credit_api.schemas.common import MessageResponse
from credit_api.schemas.user import LoginRequest
from credit_api.security import hash_password, password_policy_violations, verify_password

logger = logging.getLogger(__name__)


class AuthService:

    async def login(self, db: AsyncSession, payload: LoginRequest) -> bool:
        """
        Check a username/password pair.

        Returns False for an unknown username, a user without a password,
        or a wrong password; the three cases are indistinguishable to the
        client.
        """
        try:
            result = await db.execute(
                select(User).where(func.lower(User.username) == func.lower(payload.username))
            )
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

        if user is None or user.password_hash is None:
            logger.info("Login failed for '%s': unknown user or no password", payload.username)
            return False

        valid = await run_in_threadpool(verify_password, payload.password, user.password_hash)
        if valid:
            logger.info("Login succeeded for user %s", user.id)
        else:
            logger.warning("Login failed for user %s: wrong password", user.id)
        return valid

    async def reset_password(
        self, db: AsyncSession, user_id: str, new_password: str
    ) -> MessageResponse:
        """
        Replace a user's password.

        Raises:
            NotFoundError: Unknown user (→ 404)
            ValidationError: New password fails the policy (→ 400), with the
                list of violations in details.violations
        """
        try:
            result = await db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id})

        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)

        violations = password_policy_violations(new_password)
        if violations:
            logger.warning("Password reset rejected for user %s: %d violation(s)", user_id, len(violations))
            raise ValidationError(
                message="Error resetting password",
                field="newPassword",
                context={"violations": violations},
            )

        user.password_hash = await run_in_threadpool(hash_password, new_password)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error resetting password for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(context={"user_id": user_id, "error_type": type(e).__name__})

        logger.info("Password reset for user %s", user_id)
        return MessageResponse(message="Password reset successful")


auth_service = AuthService()
