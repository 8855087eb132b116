"""
NoteBrief Backend: Application Package Initializer
===================================================

What: Marks the `notebrief` directory as a Python package.
Why:  Enables module imports like `from notebrief.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is layered the same way top to bottom:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (Ingestion, Summarization │  ← Validation, model discovery,
    │            Pipeline, Persistence)   │    retry, response extraction
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The summarization pipeline talks to the Gemini REST API directly
    (model listing + generateContent) through a shared httpx client.
"""

__version__ = "1.0.0"
