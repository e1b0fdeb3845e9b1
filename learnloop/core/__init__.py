"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/ or db/
    - core/ depends only on itself and on schemas/ (the wire types)
    - All functions are pure and deterministic; "now" is always a parameter

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
