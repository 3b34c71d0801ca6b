"""Ports — contracts implemented by the backend packages."""

from .dao import IDao, IPartialUpdateDao
from .unit_of_work import UnitOfWork

__all__ = ["IDao", "IPartialUpdateDao", "UnitOfWork"]
