# Middleware package init
"""
Swagger Manager Backend - Middleware Package
==============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: assign the correlation ID used by every log line
    2. Logging:    one access line per request (method, path, status, duration)
    3. GZip / CORS: Starlette built-ins

    Responses travel the chain in reverse, so the X-Request-ID header is
    present on every response, error responses included.
"""
