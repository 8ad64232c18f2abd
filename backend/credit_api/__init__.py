"""
Credit API - Application Package Initializer
=============================================

What: Marks the `credit_api` directory as a Python package.
Who:  Imported by uvicorn (credit_api.main:app), Alembic, and pytest.

Architecture Note:
    The backend is split into four thin layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← /Users endpoints, status codes
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← lookups, credit checks, hashing
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; services never build HTTP responses.
"""

__version__ = "1.0.0"
