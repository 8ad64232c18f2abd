"""
Credit API - Authentication Route Handlers
===========================================

What:  POST /Users/login and POST /Users/reset-password.

reset-password takes its arguments from the query string
(?userId=...&newPassword=...), the shape existing clients already send.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from credit_api.database import get_db_session
from credit_api.schemas.common import ErrorResponse, MessageResponse
from credit_api.schemas.user import LoginRequest
from credit_api.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/Users", tags=["Auth"])


@router.post(
    "/login",
    response_model=bool,
    responses={
        200: {"description": "true when the credentials match, false otherwise"},
        400: {"description": "Missing username or password", "model": ErrorResponse},
    },
    summary="Check a username and password",
)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db_session)) -> bool:
    """
    Validate credentials.

    A wrong password is not an error: the endpoint answers 200 with `false`.
    Only a malformed body is rejected (400).
    """
    return await auth_service.login(db, payload)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={
        400: {"description": "New password fails the password policy", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Set a new password for a user",
)
async def reset_password(
    user_id: str = Query(alias="userId", min_length=1, description="User identifier"),
    new_password: str = Query(alias="newPassword", min_length=1, max_length=128),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await auth_service.reset_password(db, user_id, new_password)
