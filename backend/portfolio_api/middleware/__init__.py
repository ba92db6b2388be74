"""
Portfolio API — Middleware Package
===================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the logging middleware and the exception
    handlers can read the ID from the ContextVar.
"""
