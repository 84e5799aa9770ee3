# Middleware package init
"""
Notes API - Middleware Package
================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → Route Handler

    1. Request ID: Generate correlation ID for logging and error responses
    2. Logging: Log request details with the generated request ID

    The order is reversed for responses, so the logging middleware sees the
    final status code and the request ID header is set on every response.
"""
