"""ORM Models — SQLAlchemy declarative models for persisted state.

Invariants:
    - All models inherit from Base (db/base.py)
    - The only table is kv_entries: domain state lives in JSON documents, not columns

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all runs
"""

from learnloop.models.kv_entry import KeyValueEntry  # noqa: F401
