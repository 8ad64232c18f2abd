# Services package init
"""
Credit API - Services Layer
============================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Stateless singletons; every method receives the request's AsyncSession,
       raises exceptions from credit_api.exceptions, and returns Pydantic
       response models.

Service Inventory:
    - UserService:         list/get/create/update/delete users
    - ContactService:      add/delete a user's contacts
    - AuthService:         login check and password reset
    - TransactionService:  credit debit and transaction history
"""
