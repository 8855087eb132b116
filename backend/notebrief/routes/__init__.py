# Routes package init
"""
NoteBrief Backend: API Routes Package
=======================================

Route Inventory:
    - summarize.py:  POST /api/summarize              (summarize text)
                     POST /api/upload-and-summarize   (summarize a document)
    - summaries.py:  GET  /api/summaries              (stored history)
    - models.py:     GET  /api/debug/models           (development only)
    - health.py:     GET  /health                     (service health check)

Routes stay thin: read the request, call a service, return a schema.
Errors are raised and formatted by the handlers in main.py.
"""
