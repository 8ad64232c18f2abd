"""
Credit API - ORM Models
========================

Importing this package registers every table with `Base.metadata`, which is
what Alembic autogenerate and the test fixtures rely on.
"""

from credit_api.models.user import User
from credit_api.models.contact import Contact
from credit_api.models.transaction import Transaction

__all__ = ["User", "Contact", "Transaction"]
