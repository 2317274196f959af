"""
CampFinder Backend — Application Package
==========================================

Layers, top to bottom:

    ┌─────────────────────────────────────┐
    │   Routes + Dependencies (HTTP)      │  ← status codes, auth, uploads
    ├─────────────────────────────────────┤
    │   Services                          │  ← bootcamps, query builder, geocoder, files
    ├─────────────────────────────────────┤
    │   Models & Schemas                  │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database                          │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
