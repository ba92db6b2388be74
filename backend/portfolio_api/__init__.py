"""
Portfolio API — Application Package Initializer
================================================

What: Marks the `portfolio_api` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend is a thin REST-to-document-store mapping layer:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Validation (rule tables)          │  ← Field checks + normalization
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← One document per operation
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async MongoDB handle
    └─────────────────────────────────────┘

    Three independent resources share this stack: projects, feedback and
    hire-me requests.
"""

__version__ = "1.0.0"
