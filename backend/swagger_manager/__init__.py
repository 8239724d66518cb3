"""
Swagger Manager Backend - Application Package
===============================================

What: Project and endpoint management API that keeps a generated OpenAPI
      document per project in sync with the stored endpoint records.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, principal header
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, access control,
    │                                     │    regeneration of artifacts
    ├─────────────────────────────────────┤
    │   Stores, Models & Schemas (Data)   │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  Database + Artifact Storage        │  ← Async SQLAlchemy, JSON files
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
