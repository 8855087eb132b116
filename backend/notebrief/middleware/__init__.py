# Middleware package init
"""
NoteBrief Backend: Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line and every error body of the
    request carry the same ID.
"""
