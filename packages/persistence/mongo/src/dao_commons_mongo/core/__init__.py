"""Core MongoDB persistence: the generic DAO and its unit of work."""

from .dao import MongoDao
from .uow import MongoUnitOfWork

__all__ = ["MongoDao", "MongoUnitOfWork"]
