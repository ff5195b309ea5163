"""
RoadRater Backend — Application Package Initializer
====================================================

What: Marks the `roadrater` directory as a Python package.
Who:  Imported by uvicorn (`roadrater.main:app`), pytest, and the services.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, envelopes
    ├─────────────────────────────────────┤
    │   Dependencies (auth guard, DI)     │  ← identity, gateway injection
    ├─────────────────────────────────────┤
    │    Services + Validators (Logic)    │  ← ratings, roads, auth
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy tables + Pydantic
    ├─────────────────────────────────────┤
    │    Database (Persistence gateway)   │  ← pooled async engine
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"

SERVICE_NAME = "roadrater-backend"
