"""Infrastructure Layer — key-value backends, logging setup and the mock content compiler.

Invariants:
    - Infrastructure never imports from services/
    - SQLAlchemy failures are mapped to StorageError before leaving this layer
"""
