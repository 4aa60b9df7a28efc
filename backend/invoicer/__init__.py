"""
Invoicer Backend — Application Package Initializer
====================================================

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (includes, filters,      │  ← Query building, envelopes,
    │   serializer, entity service)       │    pagination
    ├─────────────────────────────────────┤
    │   Transformers                      │  ← Entity → API fields
    ├─────────────────────────────────────┤
    │   Models (SQLAlchemy ORM)           │  ← Persistence
    └─────────────────────────────────────┘

    Every layer below the routes receives an explicit RequestContext
    (current user, account, API parameters) instead of reading request state.
"""

__version__ = "1.0.0"
