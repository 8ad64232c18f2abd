"""
Credit API - Custom Exception Hierarchy
========================================

What:  Application-specific exceptions raised by the service layer.
How:   Each exception carries a user-safe message and an optional context
       dict. Global handlers registered in main.py translate them into JSON
       error responses with the matching HTTP status code.
Who:   Raised by services; caught by the handlers in main.py.

Exception Hierarchy:
    CreditApiError (base)
    ├── ValidationError              → 400 Bad Request
    │   └── InsufficientCreditError  → 400 Bad Request
    ├── NotFoundError                → 404 Not Found
    └── DatabaseError                → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class CreditApiError(Exception):
    """
    Base exception for all Credit API application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info; returned only by handlers that opt in
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CreditApiError):
    """
    Raised when client input breaks a business rule.

    When:    Non-positive transaction amount, duplicate username, password
             that fails the policy.
    HTTP:    400 Bad Request

    Schema-level failures (missing fields, wrong types) never reach the
    services; FastAPI raises RequestValidationError for those and main.py maps
    it to the same 400 response shape.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InsufficientCreditError(ValidationError):
    """
    Raised when a transaction amount exceeds the user's credit.

    Also raised when the conditional debit matches no row, which happens when
    a concurrent transaction spent the credit between the check and the write.
    """

    def __init__(
        self,
        requested: float,
        available: Optional[float] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["requested"] = requested
        if available is not None:
            ctx["available"] = available
        super().__init__(message="Insufficient credit.", field="amount", context=ctx)
        self.requested = requested
        self.available = available


class NotFoundError(CreditApiError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown user id, contact not owned by the user, unknown
             transaction, or an empty transaction listing.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception so the routes stay free of status-code logic.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(CreditApiError):
    """
    Raised when a database operation fails unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the SQLAlchemy
    error type is kept in `context` and logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
