"""MongoDB persistence exceptions."""

from __future__ import annotations

from dao_commons_core.primitives.exceptions import PersistenceError, UnitOfWorkError


class MongoPersistenceError(PersistenceError):
    """Base for MongoDB persistence errors."""


class MongoConnectionError(MongoPersistenceError):
    """Raised when connection to MongoDB fails."""


class MongoMappingError(MongoPersistenceError):
    """Raised when a document cannot be mapped onto the entity class."""


class MongoUnitOfWorkError(UnitOfWorkError, MongoPersistenceError):
    """Raised when a MongoDB unit of work is used outside its lifecycle."""
