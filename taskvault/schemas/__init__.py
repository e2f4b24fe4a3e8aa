"""Pydantic Schemas — request/response shapes for API endpoints.

Invariants:
    - Request schemas check types only (malformed input → 400); business rules
      (lengths, formats, uniqueness) live in core/enforce_entities (→ 422)
    - Response schemas are built from ORM rows plus precomputed counts

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
