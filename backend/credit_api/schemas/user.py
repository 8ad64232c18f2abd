"""
Credit API - User, Contact & Login Schemas
===========================================

What:  Pydantic models for the user and contact endpoints and for login.
How:   FastAPI validates request bodies against the *Create/*Update models
       and serializes responses through the *Response models; anything that
       fails schema validation becomes a 400 via the handler in main.py.

Security:
    UserResponse has no password field. The hash stays in the database and
    the plain password only ever appears in request models.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Contacts
# ══════════════════════════════════════════════════════════════════════════


class ContactCreate(BaseModel):
    """Body of POST /Users/{user_id}/add-contact, and items of UserCreate.contacts."""
    nickname: str = Field(min_length=1, max_length=100, description="Display name of the contact")
    phone_number: str = Field(min_length=1, max_length=32, description="Contact phone number")

    @field_validator("nickname", "phone_number")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Rejects values that are only whitespace."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class ContactResponse(BaseModel):
    id: int = Field(description="Contact identifier")
    nickname: str
    phone_number: str
    user_id: str = Field(description="Owning user identifier")

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Users
# ══════════════════════════════════════════════════════════════════════════


class UserCreate(BaseModel):
    """
    Body of POST /Users.

    password is optional: a user created without one exists for
    bookkeeping but cannot log in until POST /Users/reset-password sets it.
    """
    username: str = Field(min_length=1, max_length=256, description="Unique login name")
    credit: float = Field(
        default=0.0, ge=0, allow_inf_nan=False, description="Starting credit balance"
    )
    password: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=128,
        description="Plain password, hashed with bcrypt before storage",
    )
    contacts: List[ContactCreate] = Field(
        default_factory=list,
        description="Contacts created together with the user",
    )

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class UserUpdate(BaseModel):
    """
    Body of PUT /Users/{user_id}.

    Full replacement of the mutable state: username, credit and the contact
    list. Omitting `contacts` clears them.
    """
    username: str = Field(min_length=1, max_length=256)
    credit: float = Field(ge=0, allow_inf_nan=False)
    contacts: List[ContactCreate] = Field(default_factory=list)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class UserResponse(BaseModel):
    id: str = Field(description="User identifier")
    username: str
    credit: float = Field(description="Current credit balance")
    contacts: List[ContactResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Authentication
# ══════════════════════════════════════════════════════════════════════════


class LoginRequest(BaseModel):
    """Body of POST /Users/login. The response is a bare JSON boolean."""
    username: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1, max_length=128)
