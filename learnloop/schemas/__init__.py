"""Pydantic Schemas — wire types for events, lessons, compiler runs and read models.

Invariants:
    - Schemas validate at every store boundary (appended events, saved versions, hydrated state)
    - JSON keys are camelCase; Python attributes are snake_case
    - Domain types from core/domain_types used for enum fields

Design Decisions:
    - Separate from models/: schemas are persisted documents, models/ is the SQL table holding them
"""
