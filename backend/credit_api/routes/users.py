"""
Credit API - User Route Handlers
=================================

What:  CRUD endpoints for users under /Users.
How:   Each handler delegates to UserService and only decides the status
       code and headers.

Status codes:
    GET    /Users            200
    GET    /Users/{user_id}  200 | 404
    POST   /Users            201 + Location | 400
    PUT    /Users/{user_id}  204 | 400 | 404
    DELETE /Users/{user_id}  204 | 404
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from credit_api.database import get_db_session
from credit_api.schemas.common import ErrorResponse
from credit_api.schemas.user import UserCreate, UserResponse, UserUpdate
from credit_api.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/Users", tags=["Users"])


@router.get(
    "",
    response_model=List[UserResponse],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List users with their contacts",
)
async def list_users(db: AsyncSession = Depends(get_db_session)) -> List[UserResponse]:
    return await user_service.list_users(db)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        404: {"description": "User not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a user by ID",
)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db_session)) -> UserResponse:
    return await user_service.get_user(db, user_id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=UserResponse,
    responses={
        201: {"description": "User created", "model": UserResponse},
        400: {"description": "Invalid body, duplicate username or weak password", "model": ErrorResponse},
    },
    summary="Create a user",
    description=(
        "Creates a user with a starting credit, an optional password and an optional "
        "list of contacts. The Location header points at the new user."
    ),
)
async def create_user(
    payload: UserCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.create_user(db, payload)
    response.headers["Location"] = f"/Users/{user.id}"
    return user


@router.put(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        400: {"description": "Invalid body or duplicate username", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        500: {"description": "A database error occurred", "model": ErrorResponse},
    },
    summary="Replace a user's username, credit and contacts",
)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await user_service.update_user(db, user_id, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Delete a user with all contacts and transactions",
)
async def delete_user(user_id: str, db: AsyncSession = Depends(get_db_session)) -> Response:
    await user_service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
