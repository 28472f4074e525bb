"""Persistence layer: SQLAlchemy models, database sessions and the access store."""

from gymaccess.infrastructure.persistence.access_store import SQLAlchemyAccessStore
from gymaccess.infrastructure.persistence.database import Database

__all__ = ["Database", "SQLAlchemyAccessStore"]
