# Routes package init
"""
Credit API - API Routes Package
================================

What:  HTTP route handlers, all mounted under /Users except health.

Route Inventory:
    - users.py:         GET    /Users
                        GET    /Users/{user_id}
                        POST   /Users
                        PUT    /Users/{user_id}
                        DELETE /Users/{user_id}
    - contacts.py:      POST   /Users/{user_id}/add-contact
                        DELETE /Users/{user_id}/delete-contact/{contact_id}
    - auth.py:          POST   /Users/login
                        POST   /Users/reset-password
    - transactions.py:  POST   /Users/{user_id}/transactions
                        GET    /Users/{user_id}/transactions
                        GET    /Users/{user_id}/transactions/{transaction_id}
                        GET    /Users/{user_id}/transactions/by-contact/{contact_id}
    - health.py:        GET    /health, GET /hello

Design Principle:
    Routes are THIN: extract path/query/body, call one service method,
    choose the status code. Errors propagate as exceptions to the global
    handlers in main.py.
"""
