"""
Credit API - Pydantic Schemas
==============================

Request and response models for the /Users API. Kept apart from the ORM
models so the wire format (e.g. no password hashes) is controlled here.
"""
