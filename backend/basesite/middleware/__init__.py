# Middleware package init
"""
Base Example Site — Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Session] → [Request ID] → [Logging] → [GZip] → Route Handler

    1. Session: Starlette's SessionMiddleware decodes the signed cookie
       into request.session and writes it back on the response
    2. Request ID: Correlation ID for every log line of the request
    3. Logging: Method, path, status and duration, tagged with the ID
    4. GZip: Compresses rendered pages above 500 bytes
"""
