"""
Credit API - Transaction Route Handlers
========================================

What:  Create transactions (credit debit) and read a user's history.
Who:   Clients paying a contact out of a user's credit.

Request Flow (POST):
    1. contactId from the query string, amount/date from the JSON body
    2. TransactionService validates ownership, amount and credit, then
       debits atomically and inserts the row
    3. 201 Created with the transaction and a Location header

Route order:
    /transactions/by-contact/{contact_id} is declared before
    /transactions/{transaction_id} so that "by-contact" is never parsed as a
    transaction id.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from credit_api.database import get_db_session
from credit_api.schemas.common import ErrorResponse
from credit_api.schemas.transaction import TransactionCreate, TransactionResponse
from credit_api.services.transaction_service import transaction_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/Users", tags=["Transactions"])


@router.post(
    "/{user_id}/transactions",
    status_code=status.HTTP_201_CREATED,
    response_model=TransactionResponse,
    responses={
        201: {"description": "Transaction recorded and credit debited", "model": TransactionResponse},
        400: {"description": "Non-positive amount or insufficient credit", "model": ErrorResponse},
        404: {"description": "User or contact not found", "model": ErrorResponse},
        500: {"description": "Save failed", "model": ErrorResponse},
    },
    summary="Pay a contact out of the user's credit",
)
async def create_transaction(
    user_id: str,
    payload: TransactionCreate,
    response: Response,
    contact_id: int = Query(alias="contactId", description="Contact receiving the amount"),
    db: AsyncSession = Depends(get_db_session),
) -> TransactionResponse:
    transaction = await transaction_service.create_transaction(db, user_id, contact_id, payload)
    response.headers["Location"] = f"/Users/{user_id}/transactions/{transaction.id}"
    return transaction


@router.get(
    "/{user_id}/transactions",
    response_model=List[TransactionResponse],
    responses={404: {"description": "User not found or no transactions", "model": ErrorResponse}},
    summary="List a user's transactions",
)
async def list_transactions(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[TransactionResponse]:
    return await transaction_service.list_transactions(db, user_id)


@router.get(
    "/{user_id}/transactions/by-contact/{contact_id}",
    response_model=List[TransactionResponse],
    responses={404: {"description": "User not found or no transactions with the contact", "model": ErrorResponse}},
    summary="List a user's transactions with one contact",
)
async def list_transactions_by_contact(
    user_id: str,
    contact_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> List[TransactionResponse]:
    return await transaction_service.list_transactions_by_contact(db, user_id, contact_id)


@router.get(
    "/{user_id}/transactions/{transaction_id}",
    response_model=TransactionResponse,
    responses={404: {"description": "Transaction not found", "model": ErrorResponse}},
    summary="Get one transaction of a user",
)
async def get_transaction(
    user_id: str,
    transaction_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> TransactionResponse:
    return await transaction_service.get_transaction(db, user_id, transaction_id)
