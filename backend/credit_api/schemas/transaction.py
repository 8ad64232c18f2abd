"""
Credit API - Transaction Schemas
=================================

The amount is deliberately unconstrained here: the non-positive and
over-credit checks live in TransactionService so that both produce the
business-rule error messages instead of a generic schema error.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from credit_api.schemas.user import ContactResponse


class TransactionCreate(BaseModel):
    """Body of POST /Users/{user_id}/transactions (the contact comes from ?contactId=)."""
    amount: float = Field(description="Credit to debit; must be > 0 and <= the user's credit")
    date: Optional[datetime] = Field(
        default=None,
        description="When the transaction happened; defaults to now (UTC)",
    )


class TransactionResponse(BaseModel):
    id: int = Field(description="Transaction identifier")
    amount: float
    date: datetime
    user_id: str
    contact_id: Optional[int] = Field(
        default=None,
        description="Null once the contact has been deleted",
    )
    contact: Optional[ContactResponse] = None

    model_config = {"from_attributes": True}
