"""MongoDB persistence for dao-commons.

Motor-backed DAO, unit of work, connection manager and the restriction
query builder.
"""

from __future__ import annotations

from .connection import MongoConnectionManager
from .core.dao import MongoDao
from .core.uow import MongoUnitOfWork
from .exceptions import (
    MongoConnectionError,
    MongoMappingError,
    MongoPersistenceError,
    MongoUnitOfWorkError,
)
from .mapper import MongoDocumentMapper
from .query_builder import MongoQueryBuilder

__all__ = [
    # Core
    "MongoConnectionManager",
    "MongoDao",
    "MongoUnitOfWork",
    # Utilities
    "MongoDocumentMapper",
    "MongoQueryBuilder",
    # Exceptions
    "MongoConnectionError",
    "MongoMappingError",
    "MongoPersistenceError",
    "MongoUnitOfWorkError",
]
