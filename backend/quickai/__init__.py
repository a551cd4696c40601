"""
QuickAI Backend - Application Package Initializer
==================================================

What: Marks the `quickai` directory as a Python package.
Who:  Imported by uvicorn (quickai.main:app), Alembic, and pytest.

Architecture Note:
    The backend is layered the same way for every action:

    ┌─────────────────────────────────────┐
    │   Routes (API Layer, /api/ai/*)     │  ← HTTP envelope only
    ├─────────────────────────────────────┤
    │   ActionService (pipeline)          │  ← policy → gateway → persist → quota
    ├─────────────────────────────────────┤
    │   Gateways                          │  ← Gemini, Pollinations, Cloudinary,
    │                                     │    Clerk, pypdf, creations table
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never talk to a gateway directly; the pipeline never touches HTTP.
"""

__version__ = "1.0.0"
