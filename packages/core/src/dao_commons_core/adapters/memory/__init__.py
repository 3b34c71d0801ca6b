"""In-memory adapters for unit tests."""

from .dao import InMemoryDao
from .unit_of_work import InMemoryUnitOfWork

__all__ = ["InMemoryDao", "InMemoryUnitOfWork"]
