"""
Credit API - Contact Route Handlers
====================================

What:  Add and remove contacts of a user. Listing contacts happens through
       GET /Users/{user_id}, which embeds them.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from credit_api.database import get_db_session
from credit_api.schemas.common import ErrorResponse
from credit_api.schemas.user import ContactCreate, ContactResponse
from credit_api.services.contact_service import contact_service

router = APIRouter(prefix="/Users", tags=["Contacts"])


@router.post(
    "/{user_id}/add-contact",
    response_model=ContactResponse,
    responses={
        400: {"description": "Invalid contact", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Add a contact to a user",
)
async def add_contact(
    user_id: str,
    payload: ContactCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ContactResponse:
    return await contact_service.add_contact(db, user_id, payload)


@router.delete(
    "/{user_id}/delete-contact/{contact_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "User or contact not found", "model": ErrorResponse}},
    summary="Remove a contact from a user",
    description="Transactions with the contact are kept; their contact_id becomes null.",
)
async def delete_contact(
    user_id: str,
    contact_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await contact_service.delete_contact(db, user_id, contact_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
