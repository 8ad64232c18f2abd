# Middleware package init
"""
Credit API - Middleware Package
================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (execution order):
    Request → [Request ID] → [Rate Limit] → [Logging] → [CORS] → Route Handler

    1. Request ID outermost: correlation ID for log lines and error bodies,
       visible even to the catch-all 500 handler
    2. Rate Limit: a throttled client costs no database work
    3. Logging: one access line per request, with the request ID
    4. CORS: FastAPI's CORSMiddleware, handles browser preflight

    Responses travel the chain in reverse, so the request ID header and the
    access log line see the final status code.
"""
