"""BaseDao — shared plumbing for the backend DAOs."""

from __future__ import annotations

import builtins
import contextlib
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from .domain.paging import PageWindow
from .ports.unit_of_work import UnitOfWork
from .primitives.exceptions import MissingUnitOfWorkError
from .restrictions import build_restriction_ast, build_update_document
from .transaction import get_current_uow

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterable, Mapping

    from .domain.descriptor import EntityDescriptor

T = TypeVar("T")
ID = TypeVar("ID")


class BaseDao(ABC, Generic[T, ID]):
    """
    Base class for DAOs that run inside a :class:`UnitOfWork`.

    Holds the entity descriptor and resolves which unit of work a call
    uses, in this order:

    1. the ``uow=`` argument of the call;
    2. the ambient unit of work of an open ``transaction_scope`` when it
       belongs to this backend (``uow_type``);
    3. a fresh one from ``uow_factory``, entered for that call only.

    Backends whose calls can run outside any transaction set
    ``requires_uow = False``; they get ``None`` instead of an error.

    Bulk helpers (``save_all``, ``delete_by_ids``) loop over the single
    entity operations.  They add no atomicity of their own: run them in a
    transaction scope when all-or-nothing behaviour is required.
    """

    uow_type: ClassVar[type[UnitOfWork]] = UnitOfWork
    requires_uow: ClassVar[bool] = True

    def __init__(
        self,
        descriptor: EntityDescriptor[T],
        uow_factory: Callable[[], UnitOfWork] | None = None,
    ) -> None:
        self.descriptor = descriptor
        self._uow_factory = uow_factory

    @property
    def entity_cls(self) -> type[T]:
        return self.descriptor.entity_cls

    # -- UoW helpers --------------------------------------------------------

    def _joined_uow(self, uow: UnitOfWork | None = None) -> UnitOfWork | None:
        """The explicit or ambient unit of work, without consulting the factory."""
        if uow is not None:
            return uow
        return get_current_uow(self.uow_type)

    @contextlib.asynccontextmanager
    async def _unit_of_work(
        self, uow: UnitOfWork | None = None
    ) -> AsyncIterator[UnitOfWork | None]:
        """Yield the unit of work one DAO call runs in."""
        joined = self._joined_uow(uow)
        if joined is not None:
            yield joined
            return
        if self._uow_factory is None:
            if self.requires_uow:
                raise MissingUnitOfWorkError(type(self).__name__)
            yield None
            return
        async with self._uow_factory() as fresh:
            yield fresh

    # -- translation helpers ------------------------------------------------

    def _restriction_ast(self, restrictions: Mapping[str, Any] | None) -> dict[str, Any]:
        return build_restriction_ast(restrictions, field_map=self.descriptor.field_map)

    def _update_document(self, contents: Mapping[str, Any]) -> dict[str, Any]:
        return build_update_document(contents, field_map=self.descriptor.field_map)

    @staticmethod
    def _window(first_result: int, max_results: int) -> PageWindow:
        return PageWindow(first_result, max_results)

    # -- single-entity operations -------------------------------------------

    @abstractmethod
    async def save(self, entity: T, *, uow: UnitOfWork | None = None) -> ID: ...

    @abstractmethod
    async def get(self, entity_id: ID, *, uow: UnitOfWork | None = None) -> T | None: ...

    @abstractmethod
    async def delete_by_id(
        self, entity_id: ID, *, uow: UnitOfWork | None = None
    ) -> None: ...

    # -- bulk operations ----------------------------------------------------

    async def save_all(
        self, entities: Iterable[T], *, uow: UnitOfWork | None = None
    ) -> builtins.list[ID]:
        """Save each entity in turn; earlier saves stay if a later one fails."""
        return [await self.save(entity, uow=uow) for entity in entities]

    async def delete_by_ids(
        self, entity_ids: Iterable[ID], *, uow: UnitOfWork | None = None
    ) -> None:
        for entity_id in entity_ids:
            await self.delete_by_id(entity_id, uow=uow)
