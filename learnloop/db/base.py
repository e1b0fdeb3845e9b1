"""Declarative Base — metadata root for the learnloop tables.

Invariants:
    - Every ORM model (currently only KeyValueEntry) subclasses Base
    - DatabaseSessionManager.create_all builds tables from Base.metadata
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
