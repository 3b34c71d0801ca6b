"""Core SQLAlchemy persistence: the generic DAO and its unit of work."""

from .dao import SQLAlchemyDao
from .uow import SQLAlchemyUnitOfWork

__all__ = ["SQLAlchemyDao", "SQLAlchemyUnitOfWork"]
